"""
Модуль: `utils/cleanup.py`.
Назначение: Очистка использованных и просроченных кодов восстановления.
"""

import click
from flask import current_app
from flask.cli import with_appcontext

from utils import reset_store
from utils.clock import utcnow


def cleanup_stale_reset_codes() -> int:
    """Выполняет очистку и пишет результат в лог приложения."""
    deleted = reset_store.purge_stale(utcnow())
    current_app.logger.info("Удалено устаревших кодов восстановления: %s", deleted)
    return deleted


@click.command("purge-reset-codes")
@with_appcontext
def purge_reset_codes_command():
    """Удалить использованные и просроченные коды восстановления пароля."""
    deleted = cleanup_stale_reset_codes()
    click.echo(f"Removed {deleted} stale reset code(s).")
