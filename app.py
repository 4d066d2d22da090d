from flask import (
    Flask,
    request,
    jsonify,
    send_file,
    Response,
)
from werkzeug.utils import secure_filename
import os
import logging
from datetime import datetime

# Import project modules
from core import config
from core.catalog import Catalog
from core.errors import EmptyOrder, FormatMismatch, OrderEngineError, UnresolvableSKU
from core.ledger import OrderLedger
from core.logging_config import setup_logging
from core.order_text import import_into, serialize
from core.report import build_summary
from core.validator import run_catalog_checks
from core.variants import generate_variants
from core.sku import encode
from excel_io.catalog_reader import load_catalog
from excel_io.excel_writer import write_order_workbook

# -----------------------------------------------------------------------------
# App & logging setup
# -----------------------------------------------------------------------------
setup_logging()
logger = logging.getLogger(__name__)

app = Flask(__name__)
app.secret_key = os.environ.get("SECRET_KEY", "dev-secret-key-change-in-production")
app.config["MAX_CONTENT_LENGTH"] = 2 * 1024 * 1024  # 2MB max order upload

ALLOWED_EXTENSIONS = {"csv", "txt"}
OUTPUT_FOLDER = os.environ.get("OUTPUT_FOLDER", "temp_outputs")

os.makedirs(OUTPUT_FOLDER, exist_ok=True)

# ---------- catalog snapshot (replaced wholesale on reload) ----------
_CATALOG = None
_CATALOG_MTIME = None

# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------


def allowed_file(filename: str) -> bool:
    """
    Check whether an uploaded order filename has an allowed extension.

    Args:
        filename: The original filename from the upload.

    Returns:
        True if the extension is .csv or .txt; otherwise False.
    """
    return "." in filename and filename.rsplit(".", 1)[1].lower() in ALLOWED_EXTENSIONS


def get_catalog(force: bool = False) -> Catalog:
    """
    Return the loaded catalog, rebuilding it when the source file changed.

    Args:
        force: Rebuild even if the file is unchanged.

    Raises:
        FileNotFoundError: CATALOG_PATH does not exist.
    """
    global _CATALOG, _CATALOG_MTIME
    path = config.catalog_path()
    if not os.path.exists(path):
        raise FileNotFoundError(f"Missing catalog at {path}")
    mtime = os.path.getmtime(path)
    if force or _CATALOG is None or _CATALOG_MTIME != mtime:
        _CATALOG = load_catalog(path)
        _CATALOG_MTIME = mtime
        logger.info(f"Loaded catalog from {path}: {_CATALOG!r}")
    return _CATALOG


def ledger_from_payload(payload) -> OrderLedger:
    """
    Build a ledger from a JSON payload of the form {"quantities": {sku: qty}}.

    Raises:
        ValueError: Missing/invalid quantities.
    """
    if not isinstance(payload, dict):
        raise ValueError("Expected a JSON object")
    quantities = payload.get("quantities")
    if not isinstance(quantities, dict):
        raise ValueError("'quantities' must be an object of SKU -> quantity")
    ledger = OrderLedger(get_catalog())
    ledger.update(quantities)
    return ledger


def _totals_json(totals: dict) -> dict:
    return {k: (str(v) if k != "item_count" else v) for k, v in totals.items()}


def _catalog_json(catalog: Catalog) -> dict:
    collections = []
    for c in catalog.collections:
        products = []
        for p in c.products:
            products.append(
                {
                    "style": p.style,
                    "description": p.description,
                    "wholesale": str(p.wholesale) if p.wholesale is not None else None,
                    "retail": str(p.retail) if p.retail is not None else None,
                    "orderable": p.orderable,
                    "variants": [
                        {
                            "sku": encode(p, v, catalog.rules),
                            "colour": v.colour,
                            "width": v.width,
                            "size": v.size,
                        }
                        for v in generate_variants(p, catalog.rules)
                    ],
                }
            )
        collections.append({"name": c.name, "products": products})
    return {"collections": collections, "qa": run_catalog_checks(catalog)}


# -----------------------------------------------------------------------------
# Routes
# -----------------------------------------------------------------------------


@app.route("/api/catalog")
def api_catalog():
    """
    Catalog with every product's orderable variants and SKUs, plus QA results.

    Returns:
        JSON {"collections": [...], "qa": {"ok", "summary"}}.
    """
    try:
        return jsonify(_catalog_json(get_catalog()))
    except FileNotFoundError as e:
        logger.error(f"Catalog error: {e}")
        return jsonify({"error": str(e)}), 503


@app.route("/api/catalog/reload", methods=["POST"])
def api_catalog_reload():
    try:
        catalog = get_catalog(force=True)
    except FileNotFoundError as e:
        logger.error(f"Catalog reload failed: {e}")
        return jsonify({"error": str(e)}), 503
    return jsonify(
        {
            "success": True,
            "collections": len(catalog.collections),
            "products": len(catalog),
            "skus": len(catalog.sku_index),
        }
    )


@app.route("/api/sku/<sku>")
def api_sku(sku):
    """
    Look up a single SKU.

    Returns:
        JSON with the product and variant, or 404 if the SKU is not in the catalog.
    """
    try:
        variant = get_catalog().require(sku)
    except UnresolvableSKU as e:
        return jsonify({"error": str(e)}), 404
    p = variant.product
    return jsonify(
        {
            "sku": sku,
            "style": p.style,
            "collection": p.collection,
            "description": p.description,
            "colour": variant.colour,
            "width": variant.width,
            "size": variant.size,
            "wholesale": str(p.wholesale) if p.wholesale is not None else None,
        }
    )


@app.route("/api/order/export", methods=["POST"])
def api_order_export():
    """
    Export an order as the SKU,Quantity text file.

    Body:
        {"customer_id": "...", "quantities": {"SKU": qty, ...}}

    Returns:
        A text attachment named after the customer id, or a 400 JSON error.
    """
    try:
        payload = request.get_json(silent=True)
        ledger = ledger_from_payload(payload)
        text = serialize(ledger)
    except (EmptyOrder, ValueError) as e:
        return jsonify({"error": str(e)}), 400

    name = secure_filename((payload.get("customer_id") or "").strip()) or "order"
    return Response(
        text,
        mimetype="text/csv",
        headers={"Content-Disposition": f"attachment; filename={name}.csv"},
    )


@app.route("/api/order/import", methods=["POST"])
def api_order_import():
    """
    Import a previously exported order file.

    Returns:
        JSON quantities and totals, or a 400 JSON error for bad files.
    """
    if "file" not in request.files:
        return jsonify({"error": "No file uploaded"}), 400

    file = request.files["file"]
    if file.filename == "":
        return jsonify({"error": "No file selected"}), 400

    if not allowed_file(file.filename):
        return jsonify({"error": "Only .csv or .txt order files are allowed"}), 400

    try:
        text = file.read().decode("ascii")
    except UnicodeDecodeError:
        return jsonify({"error": "Order file is not ASCII text"}), 400

    ledger = OrderLedger(get_catalog())
    try:
        import_into(ledger, text)
    except FormatMismatch as e:
        logger.warning(f"Rejected order import {file.filename}: {e}")
        return jsonify({"error": str(e)}), 400

    return jsonify(
        {
            "success": True,
            "quantities": dict(ledger.items()),
            "totals": _totals_json(ledger.totals()),
            "unresolved": ledger.unresolved_skus(),
        }
    )


@app.route("/api/order/summary", methods=["POST"])
def api_order_summary():
    """
    Totals, per-collection groups and the rendered HTML summary for an order.
    """
    try:
        payload = request.get_json(silent=True)
        ledger = ledger_from_payload(payload)
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    summary = build_summary(ledger, payload.get("customer_id", ""))
    summary["totals"] = _totals_json(summary["totals"])
    for g in summary["groups"]:
        g["amount"] = str(g["amount"])
        for line in g["lines"]:
            line["amount"] = str(line["amount"])
            line["unit_price"] = str(line["unit_price"]) if line["unit_price"] is not None else None
    return jsonify(summary)


@app.route("/api/order/workbook", methods=["POST"])
def api_order_workbook():
    """
    Write the order workbook and return a download URL.
    """
    try:
        payload = request.get_json(silent=True)
        ledger = ledger_from_payload(payload)
        if ledger.is_empty():
            raise EmptyOrder("Order has no items with a positive quantity")
    except (EmptyOrder, ValueError) as e:
        return jsonify({"error": str(e)}), 400

    customer = secure_filename((payload.get("customer_id") or "").strip()) or "order"
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    excel_filename = f"{timestamp}_{customer}.xlsx"
    excel_path = os.path.join(OUTPUT_FOLDER, excel_filename)
    try:
        write_order_workbook(ledger, {"customer_id": payload.get("customer_id", "")}, excel_path)
    except Exception as e:
        logger.error(f"Workbook error: {e}")
        return jsonify({"error": str(e)}), 500

    return jsonify(
        {
            "success": True,
            "totals": _totals_json(ledger.totals()),
            "download_url": f"/download/{excel_filename}",
        }
    )


@app.route("/download/<filename>")
def download_file(filename):
    """
    Download a previously generated workbook by name.

    Args:
        filename: The generated Excel filename within the output folder.

    Returns:
        A Flask file download response, or a 404 JSON response if missing.
    """
    try:
        file_path = os.path.join(OUTPUT_FOLDER, secure_filename(filename))
        if not os.path.exists(file_path):
            return jsonify({"error": "File not found"}), 404

        return send_file(
            os.path.abspath(file_path),
            as_attachment=True,
            download_name=filename,
            mimetype="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        )
    except Exception as e:
        logger.error(f"Download error: {e}")
        return jsonify({"error": "Error downloading file"}), 500


@app.route("/health")
def health_check():
    """
    Basic health check endpoint.

    Returns:
        JSON payload with service status, timestamp, and version.
    """
    return jsonify(
        {
            "status": "healthy",
            "timestamp": datetime.now().isoformat(),
            "version": "1.0.0",
        }
    )


@app.errorhandler(413)
def too_large(e):
    return jsonify({"error": "File too large. Maximum size is 2MB."}), 413


@app.errorhandler(FileNotFoundError)
def catalog_unavailable(e):
    # Routes that need the catalog let get_catalog() raise through to here
    logger.error(f"Catalog error: {e}")
    return jsonify({"error": str(e)}), 503


@app.errorhandler(OrderEngineError)
def handle_engine_error(e):
    logger.warning(f"Order engine error: {e}")
    return jsonify({"error": str(e)}), 400


# -----------------------------------------------------------------------------
# Maintenance helper
# -----------------------------------------------------------------------------


def cleanup_old_files(hours: int = 1):
    """
    Remove old workbooks from the output directory.

    Args:
        hours: Age threshold in hours; files older than this are removed.
    """
    import time

    cutoff = time.time() - hours * 3600
    for fname in os.listdir(OUTPUT_FOLDER):
        fpath = os.path.join(OUTPUT_FOLDER, fname)
        if os.path.isfile(fpath) and os.path.getmtime(fpath) < cutoff:
            try:
                os.remove(fpath)
                logger.info(f"Cleaned up old file: {fpath}")
            except OSError:
                logger.warning(f"Could not remove old file: {fpath}")


# -----------------------------------------------------------------------------
# Entrypoint
# -----------------------------------------------------------------------------
if __name__ == "__main__":
    cleanup_old_files(hours=24)
    logger.info("Cleaned up old temporary files")

    app.run(debug=True, host="0.0.0.0", port=int(os.environ.get("PORT", 5000)))
