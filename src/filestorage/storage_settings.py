import logging
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


# --- Registry entries ---


class BucketConfig(BaseModel):
    """
    Declarative bucket configuration.
    'class' optionally overrides the storage's bucket class (a class or a
    registered type key); every other entry is passed to the bucket constructor.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    bucket_class: Optional[Any] = Field(default=None, alias="class")

    def get_options(self) -> Dict[str, Any]:
        options = dict(self.model_extra or {})
        # Name and owning storage are always set by the registry.
        options.pop("name", None)
        options.pop("storage", None)
        return options


class StorageEntryConfig(BaseModel):
    """Declarative file storage configuration, as used by the storage hub."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    storage_class: Any = Field(alias="class")

    def get_options(self) -> Dict[str, Any]:
        return dict(self.model_extra or {})


# --- Environment settings ---


class StorageSettings(BaseSettings):
    """
    File storage configuration loaded from the environment (or a .env file).
    Supports both local and Azure Blob storage, selected by FILESTORAGE_BACKEND.
    """

    model_config = SettingsConfigDict(extra="ignore", populate_by_name=True)

    backend: Literal["local", "azure_blob"] = Field(default="local", validation_alias="FILESTORAGE_BACKEND")
    base_url: Optional[str] = Field(default=None, validation_alias="FILESTORAGE_BASE_URL")
    buckets: Union[List[Any], Dict[str, Any]] = Field(default_factory=list, validation_alias="FILESTORAGE_BUCKETS")
    log_level: str = Field(default="INFO", validation_alias="FILESTORAGE_LOG_LEVEL")

    # Local storage fields
    base_path: Optional[str] = Field(default=None, validation_alias="FILESTORAGE_BASE_PATH")
    file_permission: int = Field(default=0o755, validation_alias="FILESTORAGE_FILE_PERMISSION")
    dir_permission: Optional[int] = Field(default=None, validation_alias="FILESTORAGE_DIR_PERMISSION")

    # Azure storage fields
    azure_connection_string: Optional[SecretStr] = Field(
        default=None, validation_alias="FILESTORAGE_AZURE_CONNECTION_STRING"
    )
    azure_account_name: Optional[str] = Field(default=None, validation_alias="FILESTORAGE_AZURE_ACCOUNT_NAME")
    azure_use_managed_identity: bool = Field(
        default=False, validation_alias="FILESTORAGE_AZURE_USE_MANAGED_IDENTITY"
    )

    @field_validator("file_permission", "dir_permission", mode="before")
    @classmethod
    def parse_octal_permission(cls, value: Any) -> Any:
        # Permissions are given in octal notation, e.g. '0755'.
        if isinstance(value, str):
            return int(value, 8)
        return value

    @model_validator(mode="after")
    def check_backend_requirements(self) -> "StorageSettings":
        if self.backend == "local" and not self.base_path:
            raise ValueError("FILESTORAGE_BASE_PATH is required for local storage")
        if self.backend == "azure_blob" and not self.is_azure_storage():
            raise ValueError(
                "Either FILESTORAGE_AZURE_CONNECTION_STRING or "
                "(FILESTORAGE_AZURE_ACCOUNT_NAME + FILESTORAGE_AZURE_USE_MANAGED_IDENTITY=true) must be provided."
            )
        return self

    def is_local_storage(self) -> bool:
        """Check if this configuration is for local storage."""
        return self.backend == "local" and bool(self.base_path)

    def is_azure_storage(self) -> bool:
        """Check if this configuration is for Azure storage."""
        return self.backend == "azure_blob" and bool(
            self.azure_connection_string or (self.azure_account_name and self.azure_use_managed_identity)
        )
