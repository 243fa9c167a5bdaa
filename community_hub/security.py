from flask_talisman import Talisman

def init_security(app):
    """
    Production/staging security headers.
    The app serves JSON only, so the CSP denies everything but same-origin fetches.
    """
    csp = {
        "default-src": ["'none'"],
        "connect-src": ["'self'"],
        "frame-ancestors": ["'none'"],
        "base-uri":    ["'none'"],
        "form-action": ["'self'"],
    }

    Talisman(
        app,
        content_security_policy=csp,
        force_https=True,
        strict_transport_security=True,
        session_cookie_secure=True,
        frame_options="DENY",
        referrer_policy="strict-origin-when-cross-origin",
    )
