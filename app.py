# app.py
import logging
import os
from pathlib import Path

from flask import Flask, abort, jsonify, request, send_from_directory

from config import Config
from documents import QuoteData, WorkOrderData
from models import Base, latest_report, make_engine, make_session_factory, record_report
from pdf_service import QUOTE_KIND, WORK_ORDER_KIND, render_quote_report, render_work_order_report

logger = logging.getLogger(__name__)

# URL segment -> ledger document kind
URL_KINDS = {
    "quotes": QUOTE_KIND,
    "work-orders": WORK_ORDER_KIND,
}


# -----------------------------
# Helpers
# -----------------------------
def _ensure_dirs(config):
    if config.SQLALCHEMY_DATABASE_URI.startswith("sqlite:///"):
        db_file = Path(config.SQLALCHEMY_DATABASE_URI[len("sqlite:///"):])
        db_file.parent.mkdir(parents=True, exist_ok=True)
    Path(config.REPORTS_DIR).mkdir(parents=True, exist_ok=True)


def _json_payload() -> dict:
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        abort(400, description="Expected a JSON object body")
    return payload


def _with_id(payload: dict, key: str, alt_key: str, document_id: int) -> dict:
    # The id in the URL wins over whatever the body says
    payload = dict(payload)
    doc = payload.get(key) or payload.get(alt_key)
    if not isinstance(doc, dict):
        abort(400, description=f"Missing '{key}' object")
    doc = dict(doc)
    doc["id"] = document_id
    payload.pop(alt_key, None)
    payload[key] = doc
    return payload


def _report_json(report) -> dict:
    return {
        "pdfPath": report.path,
        "pages": report.pages,
        "grandTotalCents": report.grand_total_cents,
        "skippedRows": [
            {"index": r.index, "description": r.description, "reason": r.reason}
            for r in report.skipped_rows
        ],
    }


# -----------------------------
# App factory
# -----------------------------
def create_app(config_object=Config):
    logging.basicConfig(
        level=getattr(logging, str(config_object.LOG_LEVEL).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    _ensure_dirs(config_object)

    app = Flask(__name__)
    app.config.from_object(config_object)

    engine = make_engine(config_object.SQLALCHEMY_DATABASE_URI, echo=config_object.SQLALCHEMY_ECHO)
    Base.metadata.create_all(engine)

    SessionLocal = make_session_factory(engine)

    def db_session():
        return SessionLocal()

    def _generate(kind, document_id, data, render):
        try:
            report = render(
                data,
                theme=request.args.get("theme") or config_object.REPORT_THEME,
                reports_dir=config_object.REPORTS_DIR,
                logo_path=config_object.LOGO_PATH,
            )
        except OSError as e:
            logger.exception("PDF generation failed for %s %s", kind, document_id)
            return jsonify({"message": f"Failed to generate PDF: {e}"}), 500

        with db_session() as s:
            record_report(s, kind, document_id, report)
        return jsonify(_report_json(report)), 200

    @app.errorhandler(400)
    def bad_request(e):
        return jsonify({"message": e.description}), 400

    @app.errorhandler(404)
    def not_found(e):
        return jsonify({"message": e.description}), 404

    # -----------------------------
    # PDF routes
    # -----------------------------
    @app.route("/api/quotes/<int:quote_id>/generate-pdf", methods=["POST"])
    def quote_pdf_generate(quote_id):
        payload = _with_id(_json_payload(), "quote", "quote", quote_id)
        try:
            data = QuoteData.from_dict(payload)
        except (KeyError, TypeError, ValueError) as e:
            abort(400, description=f"Invalid quote payload: {e}")
        return _generate(QUOTE_KIND, quote_id, data, render_quote_report)

    @app.route("/api/work-orders/<int:work_order_id>/generate-pdf", methods=["POST"])
    def work_order_pdf_generate(work_order_id):
        payload = _with_id(_json_payload(), "workOrder", "work_order", work_order_id)
        try:
            data = WorkOrderData.from_dict(payload)
        except (KeyError, TypeError, ValueError) as e:
            abort(400, description=f"Invalid work order payload: {e}")
        return _generate(WORK_ORDER_KIND, work_order_id, data, render_work_order_report)

    @app.route("/api/<kind>/<int:document_id>/pdf")
    def latest_pdf(kind, document_id):
        doc_kind = URL_KINDS.get(kind)
        if doc_kind is None:
            abort(404, description=f"Unknown document kind: {kind}")
        with db_session() as s:
            row = latest_report(s, doc_kind, document_id)
            if row is None:
                abort(404, description="No PDF generated yet.")
            return jsonify({
                "pdfPath": row.pdf_path,
                "pages": row.pages,
                "skippedRowCount": row.skipped_rows,
                "generatedAt": row.generated_at.isoformat(),
            })

    @app.route(f"{config_object.REPORTS_URL_PREFIX}/<path:filename>")
    def pdf_file(filename):
        reports_dir = os.path.abspath(config_object.REPORTS_DIR)
        return send_from_directory(reports_dir, filename, mimetype="application/pdf")

    return app


if __name__ == "__main__":
    app = create_app()
    app.run(debug=True)
