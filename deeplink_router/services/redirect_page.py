"""HTML page used to send mobile clients on to their destination."""

import html
import json
from string import Template

_PAGE = Template("""<!DOCTYPE html>
<html>
<head>
<meta name="viewport" content="width=device-width, initial-scale=1" />
<title>Opening…</title>
<script nonce="$nonce">
(function(){
    var fallback = $fallback_js;
    window.location.replace(fallback);
})();
</script>
<style nonce="$nonce">
html,body{height:100%;margin:0;font-family:system-ui,-apple-system,Segoe UI,Roboto}
.wrap{height:100%;display:grid;place-items:center}
</style>
</head>
<body>
<div class="wrap">Redirecting…</div>
<noscript><a href="$fallback_attr">Continue</a></noscript>
</body>
</html>
""")


def _script_literal(value: str) -> str:
    # JSON string safe to embed inside a <script> element
    return (
        json.dumps(value)
        .replace("<", "\\u003c")
        .replace(">", "\\u003e")
        .replace("&", "\\u0026")
    )


def render_redirect_page(fallback_url: str, nonce: str) -> str:
    """Render the client-side redirect page for a fallback URL.

    `nonce` must match the script-src/style-src nonce sent in the page's
    Content-Security-Policy header.
    """
    return _PAGE.substitute(
        nonce=nonce,
        fallback_js=_script_literal(fallback_url),
        fallback_attr=html.escape(fallback_url, quote=True),
    )
