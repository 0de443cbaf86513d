#!/usr/bin/env python3
import asyncio
import logging
from typing import Any, Dict, Optional, Tuple

from flask import Flask, request, jsonify
from flask_cors import CORS

from . import __version__
from .config import config
from .dom import HostDocument
from .exceptions import ElementNotFoundError, ElpickError
from .filter_rules import generate_filters
from .panels import default_panels
from .preferences import JSONFileBackend, PreferenceStore
from .selector_path import css_path
from .toolkit import Toolkit

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if config.enable_debug else logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
)
logger = logging.getLogger(__name__)

app = Flask(__name__)
CORS(app)


def _error(e: Exception):
    status = 404 if isinstance(e, ElementNotFoundError) else 400
    logger.info(f"Request failed ({status}): {e}")
    return jsonify({"ok": False, "error": str(e)}), status


def _json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ElpickError("Request body must be a JSON object")
    return data


def _string_field(data: Dict[str, Any], name: str) -> str:
    value = data.get(name)
    if value is None:
        return ''
    if not isinstance(value, str):
        raise ElpickError(f"'{name}' must be a string")
    return value


def _load_target(data: Dict[str, Any]) -> Tuple[HostDocument, Any]:
    html = _string_field(data, 'html')
    selector = _string_field(data, 'selector').strip()
    if not selector:
        raise ElpickError("Missing 'selector'")
    doc = HostDocument.from_html(html, url=_string_field(data, 'url'))
    return doc, doc.query(selector)


def _make_store() -> PreferenceStore:
    component_ids = [panel.id for panel in default_panels()]
    return PreferenceStore(JSONFileBackend(config.prefs_path), component_ids=component_ids)


async def _read_prefs() -> Dict[str, Any]:
    store = _make_store()
    await store.load()
    await store.flush()
    return store.prefs


async def _write_pref(key: str, value: Any) -> Dict[str, Any]:
    store = _make_store()
    await store.load()
    store.set(key, value)
    await store.flush()
    return store.prefs


@app.route('/health', methods=['GET'])
def health_check():
    return jsonify({
        "status": "healthy",
        "version": __version__,
        "chrome_marker": config.chrome_marker,
        "highlight_class": config.highlight_class,
    })


@app.route('/api/path', methods=['POST'])
def api_path():
    try:
        _, element = _load_target(_json_body())
    except ElpickError as e:
        return _error(e)
    return jsonify({"ok": True, "path": css_path(element)})


@app.route('/api/filters', methods=['POST'])
def api_filters():
    try:
        data = _json_body()
        doc, element = _load_target(data)
        domain = _string_field(data, 'domain') or doc.hostname
    except ElpickError as e:
        return _error(e)
    filters = generate_filters(element, domain)
    return jsonify({"ok": True, "domain": domain, "filters": [f.to_dict() for f in filters]})


@app.route('/api/inspect', methods=['POST'])
def api_inspect():
    try:
        doc, element = _load_target(_json_body())
    except ElpickError as e:
        return _error(e)
    toolkit = Toolkit(doc)
    toolkit.pick(element, panel_id="inspector")
    return jsonify({
        "ok": True,
        "domain": toolkit.domain,
        "inspector": toolkit.panel("inspector").render()["result"],
        "filters": toolkit.panel("filters").render()["candidates"],
    })


@app.route('/api/prefs', methods=['GET'])
def prefs_get():
    return jsonify({"ok": True, "prefs": asyncio.run(_read_prefs())})


@app.route('/api/prefs', methods=['POST'])
def prefs_set():
    try:
        data = _json_body()
        key = _string_field(data, 'key').strip()
        if not key or 'value' not in data:
            raise ElpickError("Both 'key' and 'value' are required")
    except ElpickError as e:
        return _error(e)
    prefs = asyncio.run(_write_pref(key, data['value']))
    return jsonify({"ok": True, "prefs": prefs})


def run_server(host: str = "0.0.0.0", port: Optional[int] = None):
    port = port or config.api_port
    logger.info(f"Starting elpick API on {host}:{port}")
    app.run(host=host, port=port, debug=config.enable_debug)


if __name__ == '__main__':
    run_server()
