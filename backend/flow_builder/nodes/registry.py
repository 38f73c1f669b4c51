"""Node registry with auto-discovery."""
import importlib
import pkgutil

from .base import BaseNode, NodeDefinition, NodeKind


class NodeRegistry:
    """Singleton registry mapping node kinds to BaseNode subclasses."""

    _nodes: dict[NodeKind, type[BaseNode]] = {}

    @classmethod
    def register(cls):
        """Decorator to register a node class under its ``KIND``.

        Usage:
            @NodeRegistry.register()
            class ActionNode(BaseNode):
                KIND = NodeKind.ACTION
                ...
        """
        def decorator(node_cls: type[BaseNode]) -> type[BaseNode]:
            cls._nodes[node_cls.KIND] = node_cls
            return node_cls
        return decorator

    @classmethod
    def get(cls, kind: NodeKind | str) -> type[BaseNode]:
        try:
            key = NodeKind(kind)
        except ValueError:
            raise KeyError(f"Unknown node type: {kind}") from None
        if key not in cls._nodes:
            raise KeyError(f"Unknown node type: {kind}")
        return cls._nodes[key]

    @classmethod
    def all_definitions(cls) -> dict[str, NodeDefinition]:
        return {
            kind.value: node_cls.get_definition()
            for kind, node_cls in cls._nodes.items()
        }

    @classmethod
    def discover(cls, package_name: str) -> None:
        """Import all modules in the given package to trigger @register decorators."""
        try:
            package = importlib.import_module(package_name)
        except ImportError:
            return
        if not hasattr(package, "__path__"):
            return
        for _, module_name, _ in pkgutil.iter_modules(package.__path__):
            if module_name.startswith("_") or module_name in ("base", "registry"):
                continue
            importlib.import_module(f"{package_name}.{module_name}")
