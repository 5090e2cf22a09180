# allowance_tracker/api/server.py
"""REST/CRUD backend over the transactions and budgets tables."""
import logging
import os
from datetime import datetime

from flask import Flask, current_app, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from allowance_tracker.core.errors import NotFoundError, ValidationError
from allowance_tracker.core.insights import BudgetBand, build_insights
from allowance_tracker.core.log import configure_logging
from allowance_tracker.core.statistics import period_statistics, summarize
from allowance_tracker.services import db, ledger

logger = logging.getLogger(__name__)

PORT = int(os.environ.get("PORT", 3000))


def _now() -> datetime:
    return current_app.config["CLOCK"]()


def _payload() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


# ---------------- Flask App Factory ----------------
def create_app(db_url=None, clock=datetime.now):
    app = Flask(__name__)
    app.config["CLOCK"] = clock
    app.json.ensure_ascii = False

    # CORS
    cors_origins = os.environ.get("CORS_ORIGINS", "*")
    origins = [o.strip() for o in cors_origins.split(",") if o.strip()] or "*"
    CORS(app, resources={r"/api/*": {"origins": origins}})

    # Initialize DB
    engine = db.init_db(db_url)
    logger.info("Database initialized (%s)", engine.dialect.name)

    # ---------------- Error mapping ----------------
    @app.errorhandler(ValidationError)
    def bad_request(exc):
        return jsonify({"error": str(exc)}), 400

    @app.errorhandler(NotFoundError)
    def not_found(exc):
        return jsonify({"error": str(exc)}), 404

    @app.errorhandler(Exception)
    def server_error(exc):
        if isinstance(exc, HTTPException):
            return jsonify({"error": exc.description}), exc.code
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return jsonify({"error": str(exc)}), 500

    # ---------------- Core Endpoints ----------------
    @app.route("/api/health")
    def health():
        return jsonify({
            "status": "OK",
            "message": "Budget API is running",
            "database": db.get_engine().dialect.name,
        })

    # ---------------- Transaction Endpoints ----------------
    @app.route("/api/transactions", methods=["GET"])
    def list_transactions():
        with db.session_scope() as session:
            return jsonify([row.to_json() for row in ledger.list_transactions(session)])

    @app.route("/api/transactions/<transaction_id>", methods=["GET"])
    def get_transaction(transaction_id):
        with db.session_scope() as session:
            return jsonify(ledger.get_transaction(session, transaction_id).to_json())

    @app.route("/api/transactions", methods=["POST"])
    def create_transaction():
        data = _payload()
        with db.session_scope() as session:
            row = ledger.create_transaction(session, data, now=_now())
            body = row.to_json()
        logger.info("Created transaction %s", body["id"])
        return jsonify({"message": "Transaction created successfully", "transaction": body}), 201

    @app.route("/api/transactions/<transaction_id>", methods=["PUT"])
    def update_transaction(transaction_id):
        data = _payload()
        with db.session_scope() as session:
            body = ledger.update_transaction(session, transaction_id, data).to_json()
        return jsonify({"message": "Transaction updated successfully", "transaction": body})

    @app.route("/api/transactions/<transaction_id>", methods=["DELETE"])
    def delete_transaction(transaction_id):
        with db.session_scope() as session:
            ledger.delete_transaction(session, transaction_id)
        logger.info("Deleted transaction %s", transaction_id)
        return jsonify({"message": "Transaction deleted successfully"})

    # ---------------- Summary / Statistics ----------------
    @app.route("/api/summary")
    def summary():
        with db.session_scope() as session:
            records = ledger.transaction_records(session)
        return jsonify(summarize(records).to_dict())

    @app.route("/api/statistics/<period>")
    def statistics(period):
        with db.session_scope() as session:
            records = ledger.transaction_records(session)
        return jsonify(period_statistics(records, period, now=_now()).to_dict())

    # ---------------- Budget ----------------
    @app.route("/api/budget", methods=["GET"])
    def get_budget():
        with db.session_scope() as session:
            return jsonify(ledger.get_budget(session).to_json())

    @app.route("/api/budget", methods=["POST"])
    def save_budget():
        data = _payload()
        with db.session_scope() as session:
            body = ledger.save_budget(session, data).to_json()
        return jsonify({"message": "Budget saved successfully", "budget": body})

    # ---------------- Notifications ----------------
    @app.route("/api/notifications")
    def notifications():
        with db.session_scope() as session:
            records = ledger.transaction_records(session)
            budget_row = ledger.get_budget(session)
            budget = budget_row.to_config()
            budget_json = budget_row.to_json()

        insights = build_insights(records, budget, now=_now())
        warnings = [
            {**status.to_dict(), "type": "alert" if status.band is BudgetBand.OVER_BUDGET else "warning"}
            for status in insights.warnings
        ]
        return jsonify({
            "notifications": warnings,
            "insights": {**insights.to_dict(), "budget": budget_json},
        })

    return app


def main():
    configure_logging()
    app = create_app()
    logger.info("Budget API server running on http://localhost:%s", PORT)
    app.run(host="0.0.0.0", port=PORT)


if __name__ == "__main__":
    main()
