import argparse
import asyncio
import logging
import sys

from tenacity import retry, stop_after_attempt, wait_fixed

from core.app_context import AppContext
from core.config_loader import load_config
from core.exceptions import CompanionError
from core.utils import parse_identifier
from database.database import Database

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@retry(stop=stop_after_attempt(5), wait=wait_fixed(2))
def init_db(database: Database):
    logger.info("Initializing database...")
    try:
        database.create_tables()
        logger.info("Tables created or verified.")
    except Exception as e:
        logger.error(f"Error initializing DB: {e}")
        raise


def run_serve(config):
    import uvicorn

    logger.info(f"Starting LeetCode Companion API on {config.web.host}:{config.web.port}")
    uvicorn.run(
        "web.backend.app:app",
        host=config.web.host,
        port=config.web.port,
        reload=False,
        log_level="info"
    )


async def run_sync_problems(context: AppContext, identifiers, force: bool):
    keys = [parse_identifier(i) for i in identifiers]
    if force:
        for key in keys:
            problem = await context.sync_service.sync_problem(key, force_update=True)
            logger.info(f"#{problem.question_id} {problem.title}: math={problem.mathematical_score} ai={problem.ai_score}")
        return

    problems = await context.sync_service.sync_problems_batch(keys)
    for problem in problems:
        logger.info(f"#{problem.question_id} {problem.title}: math={problem.mathematical_score} ai={problem.ai_score}")


async def run_sync_user(context: AppContext, username: str, force: bool):
    user = await context.sync_service.sync_user(username, force_update=force)
    logger.info(f"User {user.username} stored, last updated {user.last_updated}")


async def run_sync_daily(context: AppContext):
    daily = await context.sync_service.sync_daily_problem()
    logger.info(f"Daily problem: {daily.get('questionTitle') or daily.get('questionTitleSlug')}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="LeetCode Companion")
    parser.add_argument('--config', type=str, default='config.yaml',
                        help='Path to the YAML config file (default: config.yaml)')
    parser.add_argument('--force', action='store_true',
                        help='Ignore freshness and re-fetch from the upstream API')

    commands = parser.add_subparsers(dest='command', required=True)
    commands.add_parser('serve', help='Run the HTTP API')
    commands.add_parser('init-db', help='Create database tables')
    sync_problems = commands.add_parser('sync-problems', help='Sync problems by id or slug')
    sync_problems.add_argument('identifiers', nargs='+')
    sync_user = commands.add_parser('sync-user', help='Sync one user')
    sync_user.add_argument('username')
    commands.add_parser('sync-daily', help="Sync today's problem")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    config = load_config(args.config)

    if args.command == 'serve':
        run_serve(config)
        return 0

    context = AppContext.build(config)
    try:
        if args.command == 'init-db':
            init_db(context.database)
        elif args.command == 'sync-problems':
            asyncio.run(run_sync_problems(context, args.identifiers, args.force))
        elif args.command == 'sync-user':
            asyncio.run(run_sync_user(context, args.username, args.force))
        elif args.command == 'sync-daily':
            asyncio.run(run_sync_daily(context))
    except (CompanionError, ValueError) as e:
        logger.error(f"{args.command} failed: {e}")
        return 1
    finally:
        context.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
