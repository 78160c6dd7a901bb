"""Create command implementation.

Lays out a new application skeleton:

    <name>/src/<name>.c         request handler template
    <name>/conf/<name>.conf     runtime configuration loading ./<name>.so
    <name>/assets/
    <name>/cert/                (TLS only) self-signed development certificate
    <name>/dh2048.pem           (TLS only)
    <name>/.gitignore
"""

from pathlib import Path

from ..build.build_context import BuildContext
from ..errors import CommandError
from ..output import log
from ..tls import generate_certs

SOURCE_TEMPLATE = """\
#include <kore/kore.h>
#include <kore/http.h>

int\t\tpage(struct http_request *);

int
page(struct http_request *req)
{
\thttp_response(req, 200, NULL, 0);
\treturn (KORE_RESULT_OK);
}
"""

GITIGNORE_TEMPLATE = "*.o\n.objs\n{app}.so\nassets.h\ncert\n"


def render_config(app_name: str, tls: bool) -> str:
    """Render the placeholder runtime configuration for a new application."""
    lines = [
        "# Placeholder configuration",
        "",
        "bind\t\t127.0.0.1 8888",
        f"load\t\t./{app_name}.so",
    ]
    if tls:
        lines.append("tls_dhparam\tdh2048.pem")
    lines.extend(["", "domain 127.0.0.1 {"])
    if tls:
        lines.extend(["\tcertfile\tcert/server.crt", "\tcertkey\t\tcert/server.key"])
    lines.extend(["\tstatic\t/\tpage", "}", ""])
    return "\n".join(lines)


def _mkdir(path: Path, mode: int = 0o755) -> None:
    try:
        path.mkdir(mode=mode)
    except OSError as e:
        raise CommandError(f"mkdir({path}): {e.strerror or e}") from e


def _create_file(path: Path, data: str) -> None:
    try:
        path.write_text(data, encoding="utf-8")
    except OSError as e:
        raise CommandError(f"open({path}): {e.strerror or e}") from e
    log(f"created {path}")


def create_project(context: BuildContext) -> Path:
    """Create a new application skeleton at the context's root.

    Args:
        context: Context whose root does not exist yet

    Returns:
        The application root

    Raises:
        CommandError: If the root already exists or a file cannot be written
    """
    root = context.root_dir
    app = context.app_name

    _mkdir(root)
    for name in ("src", "conf", "assets"):
        _mkdir(root / name)
    if context.tls:
        _mkdir(context.cert_dir, mode=0o700)

    _create_file(context.src_dir / f"{app}.c", SOURCE_TEMPLATE)
    _create_file(context.config_path, render_config(app, context.tls))
    _create_file(root / ".gitignore", GITIGNORE_TEMPLATE.format(app=app))

    if context.tls:
        generate_certs(context)

    log(f"{app} created successfully!")
    if context.tls:
        log("note: do NOT use the created DH parameters/certificates in production")
    return root
