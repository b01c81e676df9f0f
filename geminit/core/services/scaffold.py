"""
Scaffold files and folders — created once, never overwritten.
"""

from __future__ import annotations

import logging
import textwrap
from pathlib import Path

from geminit.core.errors import ScaffoldError

logger = logging.getLogger(__name__)

MEMORY_DIR = "memory"
OPINIONS_DIR = "opinions"
OPINION_FILES = ("agreements.md", "disagreements.md", "open_questions.md")

NOTES_FILE = "GEMINI.md"


GITIGNORE = textwrap.dedent("""\
    # Environments
    .venv/
    venv/
    env/
    ENV/

    # Secrets
    .env
    .env.*
    !.env.example

    # Python
    __pycache__/
    *.py[cod]
    *$py.class
    *.egg-info/
    .eggs/
    build/
    dist/

    # Tooling caches
    .pytest_cache/
    .mypy_cache/
    .ruff_cache/
    .coverage
    htmlcov/

    # Editors
    .vscode/
    .idea/
    *.swp

    # OS
    .DS_Store
    Thumbs.db
""")


NOTES = textwrap.dedent("""\
    # Gemini context

    This file is loaded by the Gemini CLI as project context.

    ## Memory
    - `memory/` holds notes the assistant should carry between sessions.
    - Keep entries short and dated.

    ## Opinions
    - `opinions/agreements.md` — positions we settled on.
    - `opinions/disagreements.md` — positions we rejected, and why.
    - `opinions/open_questions.md` — things still undecided.

    ## Rules
    - Never print or commit the contents of `.env`.
    - Ask before deleting files.
""")


README_TEMPLATE = textwrap.dedent("""\
    # {project}

    Workspace for working on {project} with the Gemini CLI.

    ## Setup

    1. Put your API key in `.env`:

       ```
       {secret_key}=...
       ```

    2. Activate the environment:

       ```
       source {env_name}/bin/activate      # Windows: {env_name}\\Scripts\\activate
       ```

    3. Start the CLI:

       ```
       gemini --model {model} --output-format {output_format}
       ```

    ## Layout

    - `GEMINI.md` — context loaded by the CLI
    - `memory/` — persistent notes
    - `opinions/` — settled and open positions
    - `requirements.yaml` — installed packages, regenerated on every bootstrap
""")


def render_readme(
    project: str,
    *,
    env_name: str,
    model: str,
    output_format: str,
    secret_key: str = "GEMINI_API_KEY",
) -> str:
    return README_TEMPLATE.format(
        project=project,
        secret_key=secret_key,
        env_name=env_name,
        model=model,
        output_format=output_format,
    )


def write_if_absent(path: Path, content: str, *, step: str) -> bool:
    """Write ``content`` to ``path`` only if nothing is there yet.

    Returns:
        True if written now, False if the file already existed.
    """
    if path.exists():
        logger.info("%s exists, skipping", path.name)
        return False
    try:
        path.write_text(content, encoding="utf-8")
    except OSError as e:
        raise ScaffoldError(f"Cannot write {path}: {e}", step=step, path=path) from e
    logger.info("Created %s", path.name)
    return True


def ensure_dir(path: Path, *, step: str = "folders") -> bool:
    """Create a directory if absent.

    Returns:
        True if created by this call, False if it already existed.
    """
    try:
        path.mkdir(parents=True)
    except FileExistsError:
        if not path.is_dir():
            raise ScaffoldError(f"{path} exists and is not a directory", step=step, path=path)
        return False
    except OSError as e:
        raise ScaffoldError(f"Cannot create {path}: {e}", step=step, path=path) from e
    logger.info("Created %s/", path.name)
    return True


def seed_opinions(opinions_dir: Path) -> list[str]:
    """Create the empty opinion files. Call only right after creating the dir."""
    seeded = []
    for name in OPINION_FILES:
        target = opinions_dir / name
        try:
            target.touch(exist_ok=False)
        except FileExistsError:
            continue
        except OSError as e:
            raise ScaffoldError(f"Cannot create {target}: {e}", step="opinions-seed", path=target) from e
        seeded.append(name)
    return seeded
