"""Configuration settings and models for the mirror backup application."""

from pathlib import Path
from typing import List, Optional, Union

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from ..utils.file_utils import FileHelper


class SyncJobConfig(BaseModel):
    """Configuration for an individual mirror job."""
    name: str
    source: str
    target: str  # Parent of the "current" tree and the dated backup trees
    ignore: List[str] = Field(default_factory=list)  # gitignore patterns
    enabled: bool = True
    
    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        if not v.strip():
            raise ValueError('name must not be empty')
        return v
    
    @model_validator(mode='after')
    def validate_roots(self):
        if FileHelper.is_within(self.source, self.target) and FileHelper.is_within(self.target, self.source):
            raise ValueError('source and target must be different directories')
        if FileHelper.is_within(self.target, self.source):
            raise ValueError('target must not be inside source')
        return self


class SyncOptions(BaseModel):
    """Synchronization options."""
    parallel_operations: int = 16
    dry_run: bool = False
    
    @field_validator('parallel_operations')
    @classmethod
    def validate_parallel_operations(cls, v):
        if v < 1:
            raise ValueError('parallel_operations must be at least 1')
        return v


class LoggingOptions(BaseModel):
    """Logging options."""
    log_level: str = "INFO"
    log_file: Optional[Path] = None
    max_file_size: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 5
    
    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        if v.upper() not in ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'):
            raise ValueError(f'unknown log level: {v}')
        return v.upper()


class MirrorConfig(BaseModel):
    """Main configuration class."""
    jobs: List[SyncJobConfig] = Field(default_factory=list)
    sync_options: SyncOptions = Field(default_factory=SyncOptions)
    logging: LoggingOptions = Field(default_factory=LoggingOptions)
    
    @field_validator('jobs')
    @classmethod
    def validate_unique_names(cls, v):
        names = [job.name for job in v]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"duplicate job names: {', '.join(duplicates)}")
        return v
    
    @classmethod
    def from_yaml(cls, config_path: Union[str, Path]) -> "MirrorConfig":
        """Load configuration from YAML file."""
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")
        
        with open(config_path, 'r', encoding='utf-8') as f:
            config_data = yaml.safe_load(f) or {}
        
        return cls(**config_data)
    
    def to_yaml(self, config_path: Union[str, Path]) -> None:
        """Save configuration to YAML file."""
        config_path = Path(config_path)
        config_path.parent.mkdir(parents=True, exist_ok=True)
        
        with open(config_path, 'w', encoding='utf-8') as f:
            yaml.dump(self.model_dump(mode='json', exclude_none=True), f,
                      default_flow_style=False, indent=2, sort_keys=False)
    
    def get_job_by_name(self, name: str) -> Optional[SyncJobConfig]:
        """Get job configuration by name."""
        for job in self.jobs:
            if job.name == name:
                return job
        return None
    
    def get_enabled_jobs(self) -> List[SyncJobConfig]:
        """Get all enabled jobs."""
        return [job for job in self.jobs if job.enabled]
