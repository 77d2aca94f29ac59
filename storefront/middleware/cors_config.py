from fastapi.middleware.cors import CORSMiddleware


def parse_origins(value: str):
    return [o.strip() for o in (value or "").split(",") if o.strip()]


def configure_cors(app, origins: str):
    # browser pages served from another origin call the storefront routes directly
    allowed = parse_origins(origins) or ["http://localhost:3000"]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        max_age=86400,
    )
