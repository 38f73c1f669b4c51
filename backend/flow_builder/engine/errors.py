"""Error taxonomy for graph editing, compilation and import."""


class FlowError(Exception):
    pass


class UnknownNodeError(FlowError, KeyError):
    def __init__(self, node_id: str):
        self.node_id = node_id
        super().__init__(f"Unknown node: {node_id}")

    def __str__(self) -> str:
        return self.args[0]


class InvalidConnectionError(FlowError):
    """A proposed edge violates the connection rules. The graph is unchanged."""

    def __init__(self, source_id: str, target_id: str, reason: str):
        self.source_id = source_id
        self.target_id = target_id
        self.reason = reason
        super().__init__(f"Cannot connect {source_id} -> {target_id}: {reason}")


class IneligibleNodeError(FlowError):
    """The node cannot be designated as the flow's first node."""

    def __init__(self, node_id: str, reason: str):
        self.node_id = node_id
        self.reason = reason
        super().__init__(f"Cannot set {node_id} as first node: {reason}")


class InvalidImportError(FlowError):
    """Malformed import payload. Import is all-or-nothing."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Invalid import: {reason}")


class GraphValidationError(FlowError):
    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(f"Graph validation failed: {errors}")


class MalformedDescriptorWarning(UserWarning):
    """A descriptor's nextStepId names no node in the same payload."""

    def __init__(self, node_id: str, next_step_id: str):
        self.node_id = node_id
        self.next_step_id = next_step_id
        super().__init__(
            f"Node '{node_id}' references unknown next step '{next_step_id}'"
        )
