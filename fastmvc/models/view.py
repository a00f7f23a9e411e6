"""Pydantic model for view references."""

from posixpath import splitext

from pydantic import BaseModel, ConfigDict, Field

PATH_SEPARATOR = "/"


class View(BaseModel):
    """A named, resolvable reference to renderable content.

    A path starting with the separator is absolute and used verbatim. Any
    other path is relative to the configured view folder.
    """

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., min_length=1, description="View path, absolute once resolved")
    resolved: bool = Field(default=False, description="Whether the base folder has been applied")

    @property
    def is_absolute(self) -> bool:
        """Whether the path starts with the path separator."""
        return self.path.startswith(PATH_SEPARATOR)

    @property
    def extension(self) -> str:
        """Lower-cased file extension including the dot, or an empty string."""
        return splitext(self.path)[1].lower()

    def resolve(self, base_folder: str) -> "View":
        """Return the resolved form of this view.

        Resolution happens once: a resolved view is returned unchanged.

        Args:
            base_folder: Folder prepended to relative paths

        Returns:
            Resolved View
        """
        if self.resolved:
            return self
        if self.is_absolute:
            return View(path=self.path, resolved=True)
        if not base_folder.endswith(PATH_SEPARATOR):
            base_folder = base_folder + PATH_SEPARATOR
        return View(path=base_folder + self.path, resolved=True)

    def __str__(self) -> str:
        return self.path
