from fastapi.responses import HTMLResponse, RedirectResponse, Response

from rewrite_proxy.config import ProxyConfig

# Served to rejected requests so the proxy looks like a fresh nginx install.
NGINX_WELCOME_PAGE = """<!DOCTYPE html>
<html>
<head>
<title>Welcome to nginx!</title>
<style>
html { color-scheme: light dark; }
body { width: 35em; margin: 0 auto;
font-family: Tahoma, Verdana, Arial, sans-serif; }
</style>
</head>
<body>
<h1>Welcome to nginx!</h1>
<p>If you see this page, the nginx web server is successfully installed and
working. Further configuration is required.</p>

<p>For online documentation and support please refer to
<a href="http://nginx.org/">nginx.org</a>.<br/>
Commercial support is available at
<a href="http://nginx.com/">nginx.com</a>.</p>

<p><em>Thank you for using nginx.</em></p>
</body>
</html>"""


def rejection_response(config: ProxyConfig) -> Response:
    """302 to ``URL302`` when configured, the nginx page otherwise."""
    if config.redirect_url:
        return RedirectResponse(config.redirect_url, status_code=302)
    return HTMLResponse(NGINX_WELCOME_PAGE, status_code=200)
