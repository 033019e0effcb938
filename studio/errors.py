class StudioError(Exception):
    """Base class for everything the studio raises on purpose."""


class GenerationError(StudioError):
    """The image model did not return an image."""


class OperationInProgressError(StudioError):
    def __init__(self, status: str):
        super().__init__(f"Studio is busy ({status}). Wait for the current run to finish.")
        self.status = status


class NoSourceImageError(StudioError):
    def __init__(self):
        super().__init__("Upload a product image before generating.")


class InvalidImageError(StudioError):
    pass


class UnknownImageError(StudioError):
    def __init__(self, image_id: str):
        super().__init__(f"Image '{image_id}' is not in the collection.")
        self.image_id = image_id
