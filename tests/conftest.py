"""Shared test fixtures for spawner-skills test suite."""

from pathlib import Path
from typing import Callable

import pytest

from spawnerskills.core.catalog import SkillCatalog
from spawnerskills.core.context import SharedContext
from spawnerskills.core.skill_store import SkillStore
from spawnerskills.utils.config import Config

FRONTEND_MD = """\
# Frontend Engineering

> Builds accessible, fast user interfaces.

**Category:** frontend | **Version:** 1.2.0 | **Tags:** react, ui | **Triggers:** ui|component|react

## Identity

You are a frontend engineer who cares about users.

## Patterns

### Colocate State

Keep state close to where it is used.

**When to use:** When only one subtree reads the state.

## Collaboration

### When to Hand Off

| Trigger | Delegate To | Context |
|---------|-------------|---------|
| backend\\|api\\|server | backend | Needs a new endpoint |

### Receives Work From

- **product-design**: hands over mockups

### Works Well With

- `backend`
"""

BACKEND_MD = """\
# Backend Engineering

> APIs, services and data access.

**Category:** backend | **Version:** 2.0.0

## Identity

You build reliable services.

## Anti-Patterns

### Chatty APIs

Dozens of round trips per page.

**Instead:** Aggregate on the server.

## Collaboration

### When to Hand Off

| Trigger | Delegate To | Context |
|---------|-------------|---------|
| ui|component|page | frontend | UI work |
| deploy\\|docker\\|kubernetes | devops | Shipping it |

### Receives Work From

- **frontend**: needs endpoints
"""

CACHING_MD = """\
# Caching Patterns

> Cache the right things, invalidate them correctly.

**Category:** backend | **Tags:** cache, redis

## Identity

You are a caching specialist.

## Sharp Edges (Gotchas)

### [CRITICAL] Thundering herd on expiry

**Situation:** A hot key expires under load.

**Why it happens:** Every request misses at once and hits the database.

**Solution:**
```python
# lock before recomputing
with lock(key):
    value = recompute()
```

**Detection:** `cache\\.delete\\(`

**Symptoms:**
- Database CPU spikes every TTL
- Latency cliffs

### [BOGUS] Not a real severity

**Situation:** Never parsed.

### [low] Stale reads after deploy

**Situation:** Old values survive a schema change.

**Solution:** Version your cache keys.

## Validations

### [HIGH] Cache write without TTL

**Id:** no-ttl

**Pattern:** `cache\\.set\\((?!.*ttl)`

**Message:** Cached values should expire.

**Fix:** Pass `ttl=` to every `cache.set` call.

### [low] Pickle in cache

**Pattern:** `pickle\\.dumps`

**Message:** Pickled values break across deploys.
"""


@pytest.fixture
def write_skill(tmp_path: Path) -> Callable[[str, str], Path]:
    """Write ``content`` to ``<tmp>/skills/<relative>`` and return the path."""

    def _write(relative: str, content: str) -> Path:
        path = tmp_path / "skills" / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def skills_dir(tmp_path: Path, write_skill) -> Path:
    """A small skill collection: frontend, backend and caching."""
    write_skill("frontend/frontend.md", FRONTEND_MD)
    write_skill("backend/backend.md", BACKEND_MD)
    write_skill("backend/caching-patterns.md", CACHING_MD)
    write_skill("README.md", "# Not a skill\n")
    return tmp_path / "skills"


@pytest.fixture
def store(skills_dir: Path) -> SkillStore:
    return SkillStore.from_directory(skills_dir)


@pytest.fixture
def catalog(store: SkillStore, skills_dir: Path) -> SkillCatalog:
    return SkillCatalog(store, loader=lambda: SkillStore.from_directory(skills_dir))


@pytest.fixture
def test_config(tmp_path: Path) -> Config:
    """Config with workspace pointing to tmp_path."""
    return Config(workspace=tmp_path)


@pytest.fixture
def test_context(test_config: Config, skills_dir: Path) -> SharedContext:
    """SharedContext loading the sample skills."""
    return SharedContext(config=test_config)
