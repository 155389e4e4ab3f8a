from .category_controller import category_bp
from .health_controller import health_bp
from .service_controller import service_bp

__all__ = ["category_bp", "health_bp", "service_bp"]
