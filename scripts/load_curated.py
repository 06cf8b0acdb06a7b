#!/usr/bin/env python
"""Curated content loader.

Adds curated questions and polls, shared by every guild, from a JSON file.
The bot itself never writes to the curated pools.

Usage:
    python scripts/load_curated.py FILE [--replace] [--database-url URL]

The file holds a ``questions`` list of strings and a ``polls`` list of
``[prompt, option 1, option 2]`` triples; either may be omitted.

Options:
    --replace       Retire every active curated item before loading
    --database-url  Database to load into (defaults to DATABASE_URL)
"""

import argparse
import asyncio
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy.ext.asyncio import create_async_engine

from models.domain import PollItem
from utils.exceptions import QotdError, ValidationError
from utils.repositories.content_repository import PollRepository, QuestionRepository
from utils.sqlalchemy_db import create_session_maker, init_models

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler()],
)
logger = logging.getLogger("load_curated")


def parse_curated_file(data: Any) -> tuple[list[str], list[PollItem]]:
    """Check the shape of a curated content document.

    Raises:
        ValidationError: If the document is not an object of the expected lists.
    """
    if not isinstance(data, dict):
        raise ValidationError("file", "Expected a JSON object with questions and polls")

    questions = data.get("questions", [])
    polls = data.get("polls", [])
    if not isinstance(questions, list) or not all(isinstance(q, str) for q in questions):
        raise ValidationError("questions", "questions must be a list of strings")
    if not isinstance(polls, list) or not all(
        isinstance(p, list) and len(p) == 3 for p in polls
    ):
        raise ValidationError("polls", "polls must be a list of [prompt, option, option]")

    return [q.strip() for q in questions], [PollItem(*p) for p in polls]


async def load_curated(
    session_maker, questions: list[str], polls: list[PollItem], replace: bool = False
) -> tuple[int, int]:
    """Load curated items, optionally retiring the current ones first.

    Returns:
        The number of questions and polls added.
    """
    question_repo = QuestionRepository(session_maker)
    poll_repo = PollRepository(session_maker)

    if replace:
        await question_repo.retire_curated()
        await poll_repo.retire_curated()

    added_questions = await question_repo.add_curated(questions)
    added_polls = await poll_repo.add_curated(polls)
    return added_questions, added_polls


async def main(path: Path, database_url: str, replace: bool = False) -> bool:
    try:
        questions, polls = parse_curated_file(json.loads(path.read_text(encoding="utf-8")))
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Could not read {path}: {e}")
        return False
    except ValidationError as e:
        logger.error(f"{path}: {e.message}")
        return False

    engine = create_async_engine(database_url)
    try:
        await init_models(engine)
        added = await load_curated(create_session_maker(engine), questions, polls, replace)
    except QotdError as e:
        logger.error(f"Loading curated content failed: {e.message}")
        return False
    finally:
        await engine.dispose()

    logger.info(f"Added {added[0]} questions and {added[1]} polls")
    return True


def parse_args() -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Load curated questions and polls",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("file", type=Path, help="JSON file with questions and polls")
    parser.add_argument(
        "--replace",
        action="store_true",
        help="Retire every active curated item before loading",
    )
    parser.add_argument(
        "--database-url",
        default=os.getenv("DATABASE_URL"),
        help="SQLAlchemy async database URL (defaults to DATABASE_URL)",
    )
    return parser.parse_args()


if __name__ == "__main__":
    args = parse_args()
    if not args.database_url:
        logger.error("No database URL given and DATABASE_URL is not set")
        sys.exit(2)
    success = asyncio.run(main(args.file, args.database_url, args.replace))
    sys.exit(0 if success else 1)
