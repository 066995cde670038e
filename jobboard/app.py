import argparse
import json

from . import __version__
from .database import Database, connect_db, disconnect_db, init_database
from .logger import get_logger
from .repositories import DbResponse, JobPostRepository, UserRepository

logger = get_logger()


def _print_response(response: DbResponse, not_found: str) -> None:
    if response.error is not None:
        raise SystemExit(f"Error: {response.error}")
    if response.result is None:
        print(not_found)
        return
    print(json.dumps(response.result, indent=2, default=str, ensure_ascii=False))


def cmd_init_db(db: Database, args: argparse.Namespace) -> None:
    init_database(db)
    print("Tables created and lookup data seeded.")


def cmd_get_user(db: Database, args: argparse.Namespace) -> None:
    fields = [f.strip() for f in args.fields.split(",") if f.strip()] if args.fields else None
    response = UserRepository(db).get_user(
        fields,
        user_id=args.id,
        email=args.email,
        get_password=args.with_password,
    )
    _print_response(response, "User not found.")


def cmd_get_job_post(db: Database, args: argparse.Namespace) -> None:
    response = JobPostRepository(db).get_job_post(id=args.id, client_id=args.client_id)
    _print_response(response, "Job post not found.")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="jobboard", description="Job board data layer tools")
    parser.add_argument("--version", action="store_true", help="Show version")

    subparsers = parser.add_subparsers(dest="command")
    init = subparsers.add_parser("init-db", help="Create tables and seed roles/genders (local/dev databases)")
    init.set_defaults(func=cmd_init_db)

    usr = subparsers.add_parser("get-user", help="Print a user record as JSON")
    lookup = usr.add_mutually_exclusive_group(required=True)
    lookup.add_argument("--id", type=int, help="User id")
    lookup.add_argument("--email", help="User email")
    usr.add_argument("--fields", help="Comma-separated field names, or 'all' (default: name,email,timestamps)")
    usr.add_argument("--with-password", action="store_true", help="Include hashed_password when requested")
    usr.set_defaults(func=cmd_get_user)

    job = subparsers.add_parser("get-job-post", help="Print the first job post matching the filters as JSON")
    job.add_argument("--id", type=int, help="Job post id")
    job.add_argument("--client-id", type=int, help="Client user id")
    job.set_defaults(func=cmd_get_job_post)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return

    if not hasattr(args, "func"):
        parser.print_help()
        return

    # Exits the process when DATABASE_URL is missing
    db = connect_db()
    try:
        args.func(db, args)
    finally:
        logger.log_metrics_summary()
        disconnect_db(db)


if __name__ == "__main__":
    main()
