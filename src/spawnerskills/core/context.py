from spawnerskills.core.catalog import SkillCatalog
from spawnerskills.utils.config import Config


class SharedContext:
    """Global shared state for the application."""

    config: Config
    catalog: SkillCatalog

    def __init__(self, config: Config, catalog: SkillCatalog | None = None):
        self.config = config
        self.catalog = catalog or SkillCatalog.from_config(config)
