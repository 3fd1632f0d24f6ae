"""Command-line interface for dbviz."""

import argparse
import logging
import sys
from pathlib import Path

from dbviz.drivers.utils import build_config_and_validate, connected_handler
from dbviz.exceptions import ConfigError, InvalidConnectionError, PermissionDeniedError
from dbviz.renderers import RENDERERS, get_renderer
from dbviz.visualizer import Visualizer


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(message)s",
    )

    return COMMANDS[args.command](args)


def build_parser() -> argparse.ArgumentParser:
    connection_args = argparse.ArgumentParser(add_help=False)
    connection_args.add_argument("--host", help="Server host (DBVIZ_HOST)")
    connection_args.add_argument("--port", type=int, help="Server port (DBVIZ_PORT)")
    connection_args.add_argument("--user", help="User name (DBVIZ_USER)")
    connection_args.add_argument("--password", help="Password (DBVIZ_PASSWORD)")
    connection_args.add_argument(
        "--database", help="Database to introspect (DBVIZ_DATABASE)"
    )
    connection_args.add_argument(
        "--profile", help="Option group in ~/.my.cnf (default: client)"
    )
    connection_args.add_argument(
        "-v", "--verbose", action="store_true", help="Log catalog queries"
    )

    parser = argparse.ArgumentParser(
        prog="dbviz",
        description="Database schema visualizer",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser(
        "tables", parents=[connection_args], help="List tables in the database"
    )
    subparsers.add_parser(
        "databases", parents=[connection_args], help="List visible databases"
    )
    subparsers.add_parser(
        "capabilities", parents=[connection_args], help="Show engine capabilities"
    )

    render_parser = subparsers.add_parser(
        "render", parents=[connection_args], help="Render the schema"
    )
    render_parser.add_argument(
        "--format",
        choices=sorted(RENDERERS),
        help="Output format (DBVIZ_FORMAT, default: html)",
    )
    render_parser.add_argument(
        "--output",
        type=Path,
        help="Output file path (default: stdout)",
    )

    serve_parser = subparsers.add_parser(
        "serve",
        parents=[connection_args],
        help="Serve the schema over HTTP with a database selector",
    )
    serve_parser.add_argument(
        "--listen", default="127.0.0.1", help="Address to bind (default: 127.0.0.1)"
    )
    serve_parser.add_argument(
        "--listen-port", type=int, default=8000, help="Port to bind (default: 8000)"
    )

    return parser


def _load_config(args: argparse.Namespace):
    return build_config_and_validate(
        host=args.host,
        port=args.port,
        user=args.user,
        password=args.password,
        database=args.database,
        profile=args.profile,
    )


def cmd_tables(args: argparse.Namespace) -> int:
    """List tables of the configured database."""
    try:
        config = _load_config(args)
        with connected_handler(config) as handler:
            introspector = handler.get_introspector()
            names = introspector.table_names()
            if not names:
                print(f"No tables in database '{introspector.database}'")
                return 0
            print(f"Tables in '{introspector.database}' ({len(names)}):")
            for name in names:
                print(f"  - {name}")
        return 0
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2
    except PermissionDeniedError as e:
        print(f"{e}\nAsk your DBA for access to INFORMATION_SCHEMA.", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Introspection error: {e}", file=sys.stderr)
        return 1


def _selected_database(handler) -> str | None:
    try:
        return handler.get_database()
    except InvalidConnectionError:
        return None


def cmd_databases(args: argparse.Namespace) -> int:
    """List databases visible to the configured user."""
    try:
        config = _load_config(args)
        with connected_handler(config) as handler:
            current = _selected_database(handler)
            for name in handler.get_available_databases():
                marker = "*" if name == current else " "
                print(f"{marker} {name}")
        return 0
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2
    except Exception as e:
        print(f"Introspection error: {e}", file=sys.stderr)
        return 1


def cmd_capabilities(args: argparse.Namespace) -> int:
    """Print engine capabilities."""
    try:
        config = _load_config(args)
        with connected_handler(config) as handler:
            capabilities = handler.get_capabilities()
        for key, value in capabilities.to_dict().items():
            print(f"{key}: {value}")
        return 0
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2
    except Exception as e:
        print(f"Introspection error: {e}", file=sys.stderr)
        return 1


def cmd_render(args: argparse.Namespace) -> int:
    """Introspect the database and render it in the chosen format."""
    try:
        config = _load_config(args)
        renderer = get_renderer(args.format or config.output_format)

        with connected_handler(config) as handler:
            schema = handler.get_introspector().schema()
            visualizer = Visualizer(schema, handler)
            visualizer.enable()
            output = visualizer.render(renderer)

        if args.output:
            args.output.write_text(output, encoding="utf-8")
            print(
                f"Wrote {renderer.get_name()} for '{schema.name}' "
                f"({len(schema.tables)} tables) to {args.output}"
            )
        else:
            sys.stdout.write(output)
        return 0
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2
    except PermissionDeniedError as e:
        print(f"{e}\nAsk your DBA for access to INFORMATION_SCHEMA.", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Render error: {e}", file=sys.stderr)
        return 1


def cmd_serve(args: argparse.Namespace) -> int:
    """Serve the HTML view; the database selector re-introspects per request."""
    try:
        config = _load_config(args)
        try:
            import uvicorn

            from dbviz.server import create_app
        except ImportError as e:
            raise ConfigError(
                "FastAPI and uvicorn are required to serve. "
                "Install them with: pip install 'dbviz[serve]'"
            ) from e

        app = create_app(config)
        print(f"Serving {config.host}:{config.port} at http://{args.listen}:{args.listen_port}/")
        uvicorn.run(app, host=args.listen, port=args.listen_port)
        return 0
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2


COMMANDS = {
    "tables": cmd_tables,
    "databases": cmd_databases,
    "capabilities": cmd_capabilities,
    "render": cmd_render,
    "serve": cmd_serve,
}


if __name__ == "__main__":
    sys.exit(main())
