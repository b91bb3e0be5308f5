"""
triplequery Web API

FastAPI-based REST API over a QueryEngine.
Provides endpoints for:
- Loading the dataset
- Preset queries
- User-authored SPARQL queries
- Distinct values of a predicate
"""

from typing import Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from triplequery import __version__
from triplequery.config import EngineConfig, configure_logging
from triplequery.engine import QueryEngine
from triplequery.errors import (
    DataLoadError,
    NotLoadedError,
    PresetNotFoundError,
    QueryError,
)
from triplequery.presets import get_preset, list_categories, list_presets


# Pydantic models for API
class SPARQLQuery(BaseModel):
    """SPARQL query request."""
    query: str = Field(..., description="SPARQL SELECT query string")


class LoadRequest(BaseModel):
    """Dataset load request."""
    data: Optional[str] = Field(
        default=None,
        description="Turtle content; the configured dataset is used when omitted",
    )


def _query_http_error(e: Exception) -> HTTPException:
    """Map engine errors onto HTTP status codes."""
    if isinstance(e, NotLoadedError):
        return HTTPException(status_code=503, detail=str(e))
    if isinstance(e, PresetNotFoundError):
        return HTTPException(status_code=404, detail=str(e))
    return HTTPException(status_code=400, detail=f"Query error: {str(e)}")


def create_app(engine: Optional[QueryEngine] = None, config: Optional[EngineConfig] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        engine: Optional QueryEngine instance (creates new if not provided)
        config: Optional EngineConfig; ``preload`` loads data immediately

    Returns:
        Configured FastAPI application
    """
    config = config or (engine.config if engine is not None else EngineConfig())

    app = FastAPI(
        title="triplequery API",
        description="SPARQL SELECT queries over an in-memory fact store",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.engine = engine or QueryEngine(config=config)
    if config.preload:
        app.state.engine.load_data()

    # ==========================================================================
    # Health & Info
    # ==========================================================================

    @app.get("/", tags=["Info"])
    async def root():
        """API root with basic info."""
        return {
            "name": "triplequery",
            "version": __version__,
            "docs": "/docs",
        }

    @app.get("/health", tags=["Info"])
    async def health():
        """Health check endpoint, including the dataset load state."""
        engine: QueryEngine = app.state.engine
        return {
            "status": "healthy",
            "data_state": engine.state.value,
            "facts": len(engine.store),
        }

    # ==========================================================================
    # Data
    # ==========================================================================

    @app.post("/load", tags=["Data"])
    async def load(request: Optional[LoadRequest] = None):
        """Load the dataset. A second load is a no-op."""
        engine: QueryEngine = app.state.engine
        # Blank inline data falls back to the configured dataset
        data = request.data if request and request.data and request.data.strip() else None
        try:
            added = engine.load_data(data)
        except DataLoadError as e:
            raise HTTPException(status_code=400, detail=f"Load error: {str(e)}")
        return {"facts_added": added, "data_state": engine.state.value}

    @app.get("/values", tags=["Data"])
    async def predicate_values(predicate: str = Query(..., description="Full predicate IRI")):
        """Distinct object values observed for a predicate."""
        try:
            values = app.state.engine.values_for_predicate(predicate)
        except NotLoadedError as e:
            raise _query_http_error(e)
        return {"predicate": predicate, "values": values}

    # ==========================================================================
    # Presets
    # ==========================================================================

    @app.get("/presets", tags=["Presets"])
    async def presets(category: Optional[str] = None):
        """List preset queries, optionally for one category."""
        return [p.to_dict() for p in list_presets(category)]

    @app.get("/presets/categories", tags=["Presets"])
    async def preset_categories():
        """List preset categories, starting with "All"."""
        return list_categories()

    @app.post("/presets/{query_id}/run", tags=["Presets"])
    async def run_preset(query_id: str):
        """Execute a preset query."""
        try:
            preset = get_preset(query_id)
            result = app.state.engine.run(preset.sparql)
        except (PresetNotFoundError, NotLoadedError, QueryError) as e:
            raise _query_http_error(e)
        return {"preset": preset.to_dict(), **result.to_dict()}

    # ==========================================================================
    # SPARQL
    # ==========================================================================

    @app.post("/sparql", tags=["SPARQL"])
    async def execute_sparql_query(request: SPARQLQuery):
        """Execute a SPARQL SELECT query."""
        try:
            result = app.state.engine.run(request.query)
        except (NotLoadedError, QueryError) as e:
            raise _query_http_error(e)
        return result.to_dict()

    @app.post("/sparql/parse", tags=["SPARQL"])
    async def parse_sparql(request: SPARQLQuery):
        """Parse a SPARQL query and return a summary of its structure."""
        try:
            ast = app.state.engine.parser.parse(request.query)
        except QueryError as e:
            raise HTTPException(status_code=400, detail=f"Parse error: {str(e)}")

        where = ast.where
        return {
            "type": ast.query_type,
            "prefixes": ast.prefixes,
            "variables": [v.name for v in getattr(ast, "variables", [])],
            "pattern_count": len(where.patterns),
            "filter_count": len(where.filters),
        }

    return app


# Default app instance, configured from TRIPLEQUERY_* environment variables
settings = EngineConfig.from_env()
app = create_app(config=settings)


if __name__ == "__main__":
    import uvicorn

    configure_logging(settings.log_level)
    uvicorn.run("triplequery.web:app", host="0.0.0.0", port=8000)
