"""
Versioned migration runner
Usage:
    python run_migrations.py            # apply pending migrations
    python run_migrations.py --status   # list applied / pending
    python run_migrations.py --down 1   # roll back the last N migrations

Migrations live in migrations/versions/<timestamp>_<name>.py and expose
upgrade(conn) / downgrade(conn). Applied versions are tracked in schema_migrations.
"""

import argparse
import importlib.util
import logging
import sys
from pathlib import Path

from sqlalchemy import text
from sqlalchemy.engine import Engine

logging.basicConfig(level=logging.INFO, format="%(message)s")
logger = logging.getLogger(__name__)

VERSIONS_DIR = Path(__file__).parent / "migrations" / "versions"


def ensure_version_table(engine: Engine):
    with engine.begin() as conn:
        conn.execute(
            text(
                """
                CREATE TABLE IF NOT EXISTS schema_migrations (
                    version VARCHAR(255) PRIMARY KEY,
                    applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
                """
            )
        )


def discover(versions_dir: Path = VERSIONS_DIR) -> list[Path]:
    return sorted(p for p in versions_dir.glob("*.py") if not p.name.startswith("_"))


def load(path: Path):
    spec = importlib.util.spec_from_file_location(f"migration_{path.stem}", path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def applied_versions(engine: Engine) -> list[str]:
    ensure_version_table(engine)
    with engine.connect() as conn:
        rows = conn.execute(text("SELECT version FROM schema_migrations ORDER BY version")).fetchall()
    return [r[0] for r in rows]


def upgrade(engine: Engine, versions_dir: Path = VERSIONS_DIR) -> list[str]:
    """Apply every pending migration, each in its own transaction"""
    done = set(applied_versions(engine))
    applied = []
    for path in discover(versions_dir):
        version = path.stem
        if version in done:
            continue
        logger.info(f"⬆️  Applying {version}...")
        module = load(path)
        with engine.begin() as conn:
            module.upgrade(conn)
            conn.execute(text("INSERT INTO schema_migrations (version) VALUES (:v)"), {"v": version})
        applied.append(version)
        logger.info(f"✅ {version} applied")

    if not applied:
        logger.info("Database is up to date")
    return applied


def downgrade(engine: Engine, steps: int = 1, versions_dir: Path = VERSIONS_DIR) -> list[str]:
    paths = {p.stem: p for p in discover(versions_dir)}
    reverted = []
    for version in reversed(applied_versions(engine)[-steps:] if steps > 0 else []):
        path = paths.get(version)
        if path is None:
            raise RuntimeError(f"Migration file for {version} not found")
        logger.info(f"⬇️  Reverting {version}...")
        module = load(path)
        with engine.begin() as conn:
            module.downgrade(conn)
            conn.execute(text("DELETE FROM schema_migrations WHERE version = :v"), {"v": version})
        reverted.append(version)
        logger.info(f"✅ {version} reverted")
    return reverted


def status(engine: Engine, versions_dir: Path = VERSIONS_DIR) -> list[tuple[str, bool]]:
    done = set(applied_versions(engine))
    return [(p.stem, p.stem in done) for p in discover(versions_dir)]


def main(argv=None):
    parser = argparse.ArgumentParser(description="Run database migrations")
    parser.add_argument("--status", action="store_true", help="show applied and pending migrations")
    parser.add_argument("--down", type=int, metavar="N", help="roll back the last N migrations")
    args = parser.parse_args(argv)

    from halo_optom.database import engine

    try:
        if args.status:
            for version, is_applied in status(engine):
                logger.info(f"{'✅' if is_applied else '⏳'} {version}")
        elif args.down:
            downgrade(engine, args.down)
        else:
            upgrade(engine)
    except Exception as e:
        logger.error(f"❌ Migration failed: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
