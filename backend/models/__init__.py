"""Import every ORM model so Base.metadata knows about all tables."""

from models.user import User, RefreshToken  # noqa: F401
from models.project import Project  # noqa: F401
from models.canvas_node import CanvasNode, NodeConnection  # noqa: F401
from models.ui_variation import UiVariation  # noqa: F401
from models.api_key import UserApiKey  # noqa: F401
