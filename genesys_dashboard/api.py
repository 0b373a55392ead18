"""
JSON API over the interaction store, mounted on the Dash/Flask server under /api.
"""

from __future__ import annotations

import json
import logging

import pandas as pd
from flask import Blueprint, jsonify, request

from .store import InvalidInteractionData, RecordStore

logger = logging.getLogger(__name__)


def frame_to_records(df: pd.DataFrame) -> list:
    if df.empty:
        return []
    return json.loads(df.to_json(orient="records", date_format="iso"))


def create_api_blueprint(store: RecordStore) -> Blueprint:
    bp = Blueprint("interactions_api", __name__, url_prefix="/api")

    @bp.get("/interactions")
    def list_interactions():
        try:
            return jsonify(frame_to_records(store.list_all()))
        except Exception:
            logger.exception("Failed to fetch interactions")
            return jsonify({"message": "Failed to fetch interactions"}), 500

    @bp.post("/interactions")
    def create_interaction():
        payload = request.get_json(silent=True)
        if not isinstance(payload, dict):
            return jsonify({"message": "Invalid interaction data", "errors": ["body must be a JSON object"]}), 400
        try:
            created = store.insert(payload)
        except InvalidInteractionData as exc:
            return jsonify({"message": "Invalid interaction data", "errors": exc.errors}), 400
        except Exception:
            logger.exception("Failed to create interaction")
            return jsonify({"message": "Failed to create interaction"}), 500
        return jsonify(frame_to_records(created)[0])

    @bp.post("/interactions/bulk")
    def bulk_create_interactions():
        payload = request.get_json(silent=True)
        if not isinstance(payload, list):
            return jsonify({"message": "Invalid interactions data", "errors": ["body must be a JSON array"]}), 400
        try:
            created = store.insert_many(payload)
        except InvalidInteractionData as exc:
            return jsonify({"message": "Invalid interactions data", "errors": exc.errors}), 400
        except Exception:
            logger.exception("Failed to import interactions")
            return jsonify({"message": "Failed to import interactions"}), 500
        return jsonify(
            {
                "message": f"Successfully imported {len(created)} interactions",
                "interactions": frame_to_records(created),
            }
        )

    @bp.delete("/interactions")
    def clear_interactions():
        try:
            store.clear()
        except Exception:
            logger.exception("Failed to clear interactions")
            return jsonify({"message": "Failed to clear interactions"}), 500
        return jsonify({"message": "All interactions cleared successfully"})

    @bp.get("/interactions/date-range")
    def interactions_by_date_range():
        start = request.args.get("startDate")
        end = request.args.get("endDate")
        if not start or not end:
            return jsonify({"message": "Start date and end date are required"}), 400
        start_ts = pd.to_datetime(start, errors="coerce")
        end_ts = pd.to_datetime(end, errors="coerce")
        if pd.isna(start_ts) or pd.isna(end_ts):
            return jsonify({"message": "Start date and end date must be valid dates"}), 400
        if start_ts.tzinfo is not None:
            start_ts = start_ts.tz_convert(None)
        if end_ts.tzinfo is not None:
            end_ts = end_ts.tz_convert(None)
        return jsonify(frame_to_records(store.between(start_ts, end_ts)))

    return bp
