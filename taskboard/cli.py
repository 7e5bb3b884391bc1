#!/usr/bin/env python3
"""
TASKBOARD - CLI Interface
=========================
Command-line tool for a company's kanban board.

Usage:
    taskboard list
    taskboard create "Call supplier" --content "Ask about March invoice"
    taskboard move 3 ip
    taskboard move 3 todo --index 0
    taskboard edit 3 --title "Call supplier again"
    taskboard comment 3 "Left a voicemail"
    taskboard stats
"""

import argparse
import json
import logging
import sys
from typing import Optional, List

from pydantic import ValidationError

from .config import StoreConfig, build_store
from .manager import BoardManager, MoveResult
from .schema import Column, TaskPriority

COLUMN_ALIASES = {
    "t": Column.TODO,
    "todo": Column.TODO,
    "ip": Column.IN_PROGRESS,
    "in_progress": Column.IN_PROGRESS,
    "in-progress": Column.IN_PROGRESS,
    "inprogress": Column.IN_PROGRESS,
    "d": Column.DONE,
    "done": Column.DONE,
}

LOG_LEVELS = [logging.WARNING, logging.INFO, logging.DEBUG]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="taskboard",
        description="Kanban task board for a company",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  taskboard list                         Show the board
  taskboard create "Call supplier"       Add a task to TO DO
  taskboard move 3 ip                    Move task 3 to IN PROGRESS
  taskboard move 3 todo --index 0        Move task 3 to the top of TO DO
  taskboard edit 3 --priority high       Change a task's priority
  taskboard delete 3                     Delete task 3
  taskboard comments 3                   Show comments on task 3
  taskboard stats                        Board statistics

Without --api-url (or TASKBOARD_API_URL) tasks are kept in --dir.
        """
    )
    parser.add_argument("--api-url", help="REST API base URL")
    parser.add_argument("--token", help="Bearer token")
    parser.add_argument("--company", type=int, help="Company ID")
    parser.add_argument("--dir", help="Local tasks directory")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="More logging (-vv for debug)")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # LIST command
    list_parser = subparsers.add_parser("list", help="Show the board")
    list_parser.add_argument("--json", action="store_true", help="Output as JSON")

    # CREATE command
    create_parser = subparsers.add_parser("create", help="Create a task in TO DO")
    create_parser.add_argument("title", help="Task title")
    create_parser.add_argument(
        "-c", "--content", default="",
        help="Task description (may be empty locally; the REST API requires one)"
    )
    create_parser.add_argument("-p", "--priority", choices=[p.value for p in TaskPriority], help="Priority")
    create_parser.add_argument("--tag", dest="tags", action="append", help="Tag (repeatable)")

    # EDIT command
    edit_parser = subparsers.add_parser("edit", help="Edit a task")
    edit_parser.add_argument("task_id", type=int, help="Task ID")
    edit_parser.add_argument("--title", help="New title")
    edit_parser.add_argument("-c", "--content", help="New description")
    edit_parser.add_argument("-p", "--priority", choices=[p.value for p in TaskPriority], help="New priority")

    # MOVE command
    move_parser = subparsers.add_parser("move", help="Move a task to a column")
    move_parser.add_argument("task_id", type=int, help="Task ID")
    move_parser.add_argument("column", help="todo|t, in_progress|ip, done|d")
    move_parser.add_argument("-i", "--index", type=int, help="Position in the column (default: end)")

    # DELETE command
    delete_parser = subparsers.add_parser("delete", help="Delete a task")
    delete_parser.add_argument("task_id", type=int, help="Task ID")

    # COMMENTS command
    comments_parser = subparsers.add_parser("comments", help="Show a task's comments")
    comments_parser.add_argument("task_id", type=int, help="Task ID")
    comments_parser.add_argument("--json", action="store_true", help="Output as JSON")

    # COMMENT command
    comment_parser = subparsers.add_parser("comment", help="Comment on a task")
    comment_parser.add_argument("task_id", type=int, help="Task ID")
    comment_parser.add_argument("text", help="Comment text")

    # STATS command
    stats_parser = subparsers.add_parser("stats", help="Board statistics")
    stats_parser.add_argument("--json", action="store_true", help="Output as JSON")

    return parser


def render_board(manager: BoardManager) -> str:
    board = manager.board
    lines = [f"📋 Company {manager.company_id} board ({len(board)} tasks)", ""]
    for column in Column:
        tasks = board.tasks(column)
        lines.append(f"{column.header} ({len(tasks)})")
        if not tasks:
            lines.append("  (empty)")
        for task in tasks:
            author = f" · {task.author.display_name}" if task.author else ""
            lines.append(f"  [{task.id}] {task.title}{author}")
        lines.append("")
    return "\n".join(lines).rstrip()


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    logging.basicConfig(
        level=LOG_LEVELS[min(args.verbose, len(LOG_LEVELS) - 1)],
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = StoreConfig.from_env(
            api_url=args.api_url,
            token=args.token,
            company_id=args.company,
            data_dir=args.dir,
        )
    except ValidationError as e:
        print(f"❌ Invalid configuration: {e}")
        return 1

    manager = BoardManager(build_store(config), company_id=config.company_id)
    if not manager.reload():
        print(f"❌ {manager.notice}")
        return 1

    # Execute command
    if args.command == "list":
        if args.json:
            data = {
                column.status.value: [task.to_wire() for task in manager.board.tasks(column)]
                for column in Column
            }
            print(json.dumps(data, indent=2))
        else:
            print(render_board(manager))

    elif args.command == "create":
        fields = {}
        if args.priority:
            fields["priority"] = args.priority
        if args.tags:
            fields["tags"] = args.tags
        task = manager.create_task(args.title, args.content, **fields)
        if not task:
            print(f"❌ {manager.notice}")
            return 1
        print(f"✅ Created: [{task.id}] {task.title}")

    elif args.command == "edit":
        changes = {
            key: value for key, value in (
                ("title", args.title),
                ("content", args.content),
                ("priority", args.priority),
            ) if value is not None
        }
        if not changes:
            print("Nothing to change")
            return 1
        task = manager.update_task(args.task_id, **changes)
        if not task:
            print(f"❌ {manager.notice}")
            return 1
        print(f"✏️ Updated: [{task.id}] {task.title}")

    elif args.command == "move":
        location = manager.board.locate(args.task_id)
        if location is None:
            print(f"❌ Task not found: {args.task_id}")
            return 1
        dest = COLUMN_ALIASES.get(args.column.lower())
        if dest is None:
            print(f"❌ Invalid column: {args.column}")
            return 1

        source, from_index = location
        to_index = args.index
        if to_index is None:
            to_index = len(manager.board.task_ids(dest))
            if dest is source:
                to_index -= 1

        result = manager.move(args.task_id, source, from_index, dest, to_index)
        if result is MoveResult.MOVED:
            print(f"➡️ Task {args.task_id} moved to {dest.header}")
        elif result is MoveResult.REORDERED:
            print(f"↕️ Task {args.task_id} reordered within {dest.header} (not saved)")
        elif result is MoveResult.NOOP:
            print(f"Task {args.task_id} already there")
        else:
            print(f"❌ {manager.notice or f'Move {result.value}'}")
            return 1

    elif args.command == "delete":
        if not manager.delete_task(args.task_id):
            print(f"❌ {manager.notice}")
            return 1
        print(f"🗑️ Deleted task {args.task_id}")

    elif args.command == "comments":
        comments = manager.comments(args.task_id)
        if manager.notice:
            print(f"❌ {manager.notice}")
            return 1
        if args.json:
            print(json.dumps([c.to_wire() for c in comments], indent=2))
        elif not comments:
            print("No comments")
        else:
            for comment in comments:
                author = comment.author.display_name if comment.author else "Unknown user"
                print(f"  {comment.created_at:%Y-%m-%d %H:%M} {author}: {comment.content}")

    elif args.command == "comment":
        comment = manager.add_comment(args.task_id, args.text)
        if not comment:
            print(f"❌ {manager.notice}")
            return 1
        print(f"💬 Comment added to task {args.task_id}")

    elif args.command == "stats":
        stats = manager.statistics()
        if args.json:
            print(json.dumps(stats.model_dump(), indent=2))
        else:
            filled = int(stats.completion_rate // 10)
            print(f"Tasks: {stats.total}")
            print(f"Progress: {'█' * filled}{'░' * (10 - filled)} {stats.completion_rate}%")
            print(f"By status: {stats.by_status}")
            print(f"By priority: {stats.by_priority}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
