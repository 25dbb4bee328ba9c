"""Serve a roomgate App with pounce.

Pounce is an optional dependency (``pip install roomgate[server]``) and is
imported only when the app is actually run.
"""


def run_server(
    app: object,
    host: str,
    port: int,
    *,
    reload: bool = False,
    log_level: str = "info",
) -> None:
    """Start a single-worker pounce server with the given app.

    Pounce's ``run()`` takes an import string, but here we already hold a
    live ``App`` object, so ``pounce.Server`` is used directly with the
    ASGI callable.
    """
    try:
        from pounce.config import ServerConfig
        from pounce.server import Server
    except ImportError as exc:
        msg = "Serving requires pounce. Install it with: pip install roomgate[server]"
        raise RuntimeError(msg) from exc

    config = ServerConfig(
        host=host,
        port=port,
        workers=1,
        reload=reload,
        log_level=log_level,
    )
    Server(config, app).run()
