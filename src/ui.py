"""Single-page browser UI served from ``GET /ui``."""

from __future__ import annotations

import formats

_STYLE = (
    "body{font-family:sans-serif;max-width:680px;margin:40px auto;background:#0f172a;color:#e2e8f0}"
    "input{width:70%;padding:8px}button{padding:8px 14px}"
    ".result-item{border:1px solid #334155;border-radius:8px;padding:12px;margin:8px 0}"
    ".result-title{font-weight:bold}.result-note,.results-explanation{color:#fbbf24}"
    "a{color:#4be28c}.no-results,.error{color:#94a3b8}"
)

_SCRIPT = """
const esc = (t) => String(t).replace(/[&<>"']/g, (m) => ({'&':'&amp;','<':'&lt;','>':'&gt;','"':'&quot;',"'":'&#039;'}[m]));
async function track(key) {
  try { await fetch('./api/stats/' + encodeURIComponent(key), {method: 'POST'}); } catch (e) {}
}
function render(data) {
  if (data.isChainTransaction) {
    const c = data.chain;
    return `<div class="result-item ${esc(c.chainKey)}"><div class="result-title">${esc(c.displayName)} transaction</div>`
      + `<div>${esc(c.description)}</div>`
      + `<a href="${esc(c.explorerUrl)}" target="_blank" rel="noopener noreferrer" onclick="track('${esc(c.chainKey)}')">View on explorer</a></div>`;
  }
  if (!data.count) {
    return `<div class="no-results">No matching service found for order ID: <strong>${esc(data.orderId)}</strong><br>Please check the format and try again.</div>`;
  }
  let html = data.count > 1
    ? '<div class="results-explanation">This order format could match more than one partner. Please click the partner you used for this order.</div>'
    : '';
  for (const r of data.results) {
    html += `<div class="result-item ${esc(r.key)}"><div class="result-title">${esc(r.displayName)}</div>`
      + `<div>${esc(r.description)}</div>`
      + `<a href="${esc(r.trackingUrl)}" target="_blank" rel="noopener noreferrer" onclick="track('${esc(r.key)}')">View Order Status</a>`
      + (r.note ? `<div class="result-note">${esc(r.note)}</div>` : '')
      + '</div>';
  }
  return html;
}
async function lookup() {
  const id = document.getElementById('orderId').value.trim();
  const out = document.getElementById('results');
  if (!id) { out.innerHTML = '<div class="error">Please enter an order ID</div>'; return; }
  const r = await fetch('./api/lookup', {method: 'POST', headers: {'Content-Type': 'application/json'}, body: JSON.stringify({orderId: id})});
  const data = await r.json();
  out.innerHTML = r.ok ? render(data) : `<div class="error">${esc(data.error)}</div>`;
}
document.getElementById('orderId').addEventListener('keypress', (e) => { if (e.key === 'Enter') lookup(); });
"""


def _supported_formats() -> str:
    names = ", ".join(partner.display_name for partner in formats.PARTNER_FORMATS)
    chains = ", ".join(chain.display_name for chain in formats.CHAIN_FORMATS)
    return f"<p>Partners: {names}. Transaction hashes: {chains}.</p>"


def render_page() -> str:
    return (
        "<!doctype html><meta charset='utf-8'><title>Order Lookup</title>"
        f"<style>{_STYLE}</style>"
        "<h2>Order Lookup</h2>"
        f"{_supported_formats()}"
        "<input id=orderId placeholder='Order ID or transaction hash' autofocus>"
        "<button onclick=lookup()>Search</button>"
        "<div id=results></div>"
        f"<script>{_SCRIPT}</script>"
    )
