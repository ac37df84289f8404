from __future__ import annotations
import argparse
from flask import Flask, request, jsonify, Response
from typeahead.engine import Engine
from typeahead import config as CFG
from typeahead.normalize import find_span

app = Flask(__name__)
_engine: Engine | None = None


def _require_engine() -> Engine:
    if _engine is None:
        raise RuntimeError("Engine not initialized. Run via main() or set typeahead_web.web._engine.")
    return _engine

# ---------- API ----------
@app.get("/api/search")
def api_search():
    q = request.args.get("q", "", type=str)
    seq = request.args.get("seq", 0, type=int)
    titles = _require_engine().search(q)
    # highlight ranges come from the same folding the matcher uses
    spans = [find_span(t, q) for t in titles]
    return jsonify({"seq": seq, "query": q, "titles": titles, "spans": spans, "count": len(titles)})

@app.get("/api/catalog")
def api_catalog():
    catalog = _require_engine().catalog or ()
    return jsonify([
        {"id": e.id, "title": e.title, "year": e.year, "tags": sorted(e.tags)}
        for e in catalog
    ])

@app.get("/health")
def health():
    eng = _engine
    n = len(eng.catalog) if eng is not None and eng.catalog is not None else 0
    return jsonify({"ok": eng is not None and eng.catalog is not None, "entries": n})

# ---------- UI ----------
@app.get("/")
def home():
    # Single page: CSS variables + minimal JS, no external deps.
    html = r"""
<!doctype html>
<html lang="en">
<head>
<meta charset="utf-8" />
<meta name="viewport" content="width=device-width,initial-scale=1" />
<title>Type-ahead • Movie search</title>
<style>
:root{
  --bg:#0b0f14; --panel:#0f141b; --ink:#cfd8e3; --muted:#8a94a6;
  --accent:#6ee7ff; --border:#1c2530; --mark-bg:rgba(110,231,255,.2);
}
*{box-sizing:border-box}
body{
  margin:0; background:var(--bg); color:var(--ink);
  font:16px/1.45 system-ui,-apple-system,Segoe UI,Roboto,Ubuntu,"Helvetica Neue",Arial;
}
.container{ max-width:720px; margin:24px auto; padding:0 16px }
.card{
  background:var(--panel); border:1px solid var(--border);
  border-radius:16px; padding:18px; box-shadow:0 10px 30px rgba(0,0,0,.25);
}
h1{ font-size:20px; margin:0 0 8px 0 }
input{
  width:100%; padding:12px 14px; border-radius:12px; border:1px solid var(--border);
  background:#0b1117; color:var(--ink); outline:none; font-size:16px;
}
input:focus{ border-color:var(--accent) }
.meta{ color:var(--muted); font-size:13px; margin-top:6px }
.results{ margin-top:16px; border-radius:12px; border:1px solid var(--border) }
.row{ padding:10px 14px; border-top:1px solid var(--border) }
.row:first-child{ border-top:none }
.mark{ background:var(--mark-bg) }
.empty{ padding:24px; text-align:center; color:var(--muted) }
</style>
</head>
<body>
  <div class="container">
    <div class="card">
      <h1>Search for Movie</h1>
      <input id="q" type="search" placeholder="Search for Movie" autocomplete="off" autofocus />
      <div class="meta" id="stats">Ready.</div>
      <div class="results"><div id="out" class="empty">Loading…</div></div>
    </div>
  </div>

<script>
const DEBOUNCE_MS = __DEBOUNCE_MS__;
const $ = (sel) => document.querySelector(sel);
const q = $("#q"), out = $("#out"), stats = $("#stats");

let t;            // debounce timer
let seq = 0;      // sequence of issued queries
let rendered = 0; // highest seq already on screen

function esc(s){ return s.replace(/[&<>"]/g, c => ({"&":"&amp;","<":"&lt;",">":"&gt;",'"':"&quot;"}[c])); }
function highlight(text, span){
  if(!span) return esc(text);
  const [s, e] = span;
  return esc(text.slice(0,s)) + `<span class="mark">${esc(text.slice(s, e))}</span>` + esc(text.slice(e));
}

async function search(){
  const mine = ++seq;
  const query = q.value;
  try{
    const resp = await fetch(`/api/search?q=${encodeURIComponent(query)}&seq=${mine}`);
    if(!resp.ok) throw new Error(`HTTP ${resp.status}`);
    const data = await resp.json();
    if(data.seq < rendered) return;   // an older response arrived late
    rendered = data.seq;
    stats.textContent = `Results: ${data.count}`;
    if(data.count === 0){
      out.className = "empty"; out.innerHTML = "No matches."; return;
    }
    out.className = "";
    out.innerHTML = data.titles.map((title, i) => `<div class="row">${highlight(title, data.spans[i])}</div>`).join("");
  }catch(e){
    stats.textContent = `Error: ${e.message ?? e}`;
  }
}

function debouncedSearch(){
  clearTimeout(t);
  t = setTimeout(search, DEBOUNCE_MS);
}

q.addEventListener("input", debouncedSearch);
window.addEventListener("keydown", (ev)=>{
  if(ev.key === "Enter"){ clearTimeout(t); search(); }
});
search();
</script>
</body>
</html>
"""
    html = html.replace("__DEBOUNCE_MS__", str(_engine.delay_ms if _engine else CFG.DEBOUNCE_MS))
    return Response(html, mimetype="text/html")

def main(argv=None) -> int:
    ap = argparse.ArgumentParser(description="Run the Flask type-ahead page")
    ap.add_argument("--catalog", default=None)
    ap.add_argument("--delay-ms", type=int, default=CFG.DEBOUNCE_MS)
    ap.add_argument("--empty-shows-none", action="store_true")
    ap.add_argument("--host", default="127.0.0.1")
    ap.add_argument("--port", type=int, default=8000)
    ap.add_argument("--verbose", action="store_true")
    args = ap.parse_args(argv)

    global _engine
    _engine = Engine(delay_ms=args.delay_ms, empty_shows_all=not args.empty_shows_none)
    _engine.load(args.catalog, verbose=args.verbose)

    try:
        app.run(host=args.host, port=args.port, debug=args.verbose)
    finally:
        _engine.shutdown()
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
