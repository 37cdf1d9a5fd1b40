from scholar.application.services.search.search_orchestrator import (
    SearchOrchestrator,
)

__all__ = ["SearchOrchestrator"]
