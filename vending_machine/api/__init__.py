"""
Vending Machine API Application Factory
"""

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .orders import router as orders_router
from .cash import router as cash_router
from .products import router as products_router
from .seed import router as seed_router
from .. import __version__


def create_app() -> FastAPI:
    """Create and configure the FastAPI application"""
    app = FastAPI(
        title="Vending Machine API",
        description="Vending machine backend with transactional cash and product ledgers",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc"
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(orders_router, prefix="/orders", tags=["Orders"])
    app.include_router(cash_router, prefix="/cash", tags=["Cash"])
    app.include_router(products_router, prefix="/products", tags=["Products"])
    app.include_router(seed_router, prefix="/seed", tags=["Seed"])

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "service": "vending_machine_api",
            "version": __version__
        }

    @app.get("/")
    async def get_api_info():
        """Get API information"""
        return {
            "name": "Vending Machine API",
            "version": __version__,
            "endpoints": {
                "docs": "/docs",
                "health": "/health",
                "orders": "/orders",
                "cash": "/cash",
                "products": "/products",
                "seed": "/seed",
            }
        }

    return app


app = create_app()


def run_server(host: str = "0.0.0.0", port: int = 8080, debug: bool = False, log_level: str = "info"):
    """Run the FastAPI server"""
    uvicorn.run(
        "vending_machine.api:app",
        host=host,
        port=port,
        reload=debug,
        log_level=log_level
    )
