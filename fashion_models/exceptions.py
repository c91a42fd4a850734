class FashionModelNotFound(Exception):
    """Raised when a fashion model id does not resolve to a usable record."""

    def __init__(self, model_id, active_only=False):
        self.model_id = model_id
        self.active_only = active_only
        qualifier = 'active ' if active_only else ''
        super().__init__(f"No {qualifier}fashion model with id {model_id}")
