import logging
from abc import ABC, abstractmethod
from typing import Any

from inventory_sync.engine import ReconciliationEngine

logger = logging.getLogger(__name__)


class DataPipeline(ABC):
    """
    Abstract base class for pipelines that feed the reconciliation engine.
    Follows an Extract -> Transform -> Load (ETL) pattern.
    """

    def __init__(self, name: str, engine: ReconciliationEngine, test_mode: bool = False):
        self.name = name
        self.engine = engine
        self.test_mode = test_mode

    def run(self) -> Any:
        """
        Orchestrates the pipeline execution and returns whatever `transform` produced.
        """
        logger.info(f"🚀 STEP: {self.name.upper()}")
        logger.info("-" * 30)

        # --- 1. EXTRACT ---
        raw_data = self.extract()
        if not raw_data:
            logger.warning(f"⚠️ No input found for {self.name}. Nothing to do.")
            return None

        # --- 2. TRANSFORM ---
        result = self.transform(raw_data)
        if result is None:
            logger.error(f"❌ {self.name.capitalize()} produced no result.")
            return None

        # --- 3. LOAD ---
        self.load(result)

        logger.info(f"✅ {self.name.capitalize()} Pipeline Finished.\n")
        logger.info("=" * 60)
        return result

    @abstractmethod
    def extract(self) -> Any:
        """
        Responsible for finding and reading input files.
        Returns the raw input for `transform`, or something falsy when there is none.
        """
        pass

    @abstractmethod
    def transform(self, raw_data: Any) -> Any:
        """
        Responsible for handing the raw input to the engine.
        Returns the result to load, or None on failure.
        """
        pass

    def load(self, result: Any):
        """Default: nothing to persist."""
        pass
