"""Main backup manager orchestrating mirror runs."""

import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from ..config.settings import MirrorConfig, SyncJobConfig
from ..exceptions import RootInitializationError
from ..utils.logging import TimedOperation
from .backends import NoopBackend
from .engine import sync
from .events import EventBus

# Module logger
logger = logging.getLogger(__name__)


class BackupManager:
    """Runs configured mirror jobs and collects their results."""

    def __init__(self, config: Optional[MirrorConfig] = None):
        """Initialize backup manager.

        Args:
            config: Mirror configuration
        """
        self.config = config or MirrorConfig()

    async def run_sync(
        self,
        source: str,
        target: str,
        ignore: Iterable[str] = (),
        name: Optional[str] = None,
        dry_run: Optional[bool] = None,
        bus: Optional[EventBus] = None
    ) -> Dict[str, Any]:
        """Mirror one source into one target.

        Args:
            source: Directory to mirror
            target: Parent of the current tree and the backup trees
            ignore: Extra gitignore patterns
            name: Name reported in the results (defaults to the source)
            dry_run: Walk and report without touching any tree
                (defaults to the configured option)
            bus: Event channels for the live trace

        Returns:
            Dictionary with run results
        """
        options = self.config.sync_options
        if dry_run is None:
            dry_run = options.dry_run

        start_time = datetime.now()
        results = {
            'job_name': name or source,
            'source': source,
            'target': target,
            'start_time': start_time,
            'status': 'started',
            'dry_run': dry_run,
            'files_copied': 0,
            'files_relocated': 0,
            'bytes_copied': 0,
            'backup_root': None,
            'errors': []
        }

        try:
            with TimedOperation(logger, f"sync of {results['job_name']}"):
                report = await sync(
                    source,
                    target,
                    NoopBackend() if dry_run else None,
                    bus=bus,
                    ignore_patterns=ignore,
                    parallel_operations=options.parallel_operations,
                )

            results['files_copied'] = report.files_copied
            results['files_relocated'] = report.files_relocated
            results['bytes_copied'] = report.bytes_copied
            results['backup_root'] = report.backup_root
            results['errors'].extend(report.errors)
            results['status'] = 'completed'

        except RootInitializationError as e:
            logger.error(f"Sync {results['job_name']} failed: {e}")
            results['status'] = 'failed'
            results['errors'].append(str(e))

        finally:
            results['end_time'] = datetime.now()
            results['duration'] = (results['end_time'] - start_time).total_seconds()

        return results

    async def run_backup_job(self, job_config: SyncJobConfig, dry_run: Optional[bool] = None,
                             bus: Optional[EventBus] = None) -> Dict[str, Any]:
        """Run a single configured job.

        Args:
            job_config: Configuration for the job
            dry_run: Overrides the configured dry-run option
            bus: Event channels for the live trace

        Returns:
            Dictionary with run results
        """
        logger.info(f"Starting backup job: {job_config.name}")
        return await self.run_sync(
            job_config.source,
            job_config.target,
            ignore=job_config.ignore,
            name=job_config.name,
            dry_run=dry_run,
            bus=bus,
        )

    async def run_all_jobs(self, dry_run: Optional[bool] = None,
                           bus: Optional[EventBus] = None) -> List[Dict[str, Any]]:
        """Run all enabled jobs one after another.

        Returns:
            List of job results
        """
        enabled_jobs = self.config.get_enabled_jobs()
        logger.info(f"Running {len(enabled_jobs)} backup jobs")

        results = []
        for job in enabled_jobs:
            job_result = await self.run_backup_job(job, dry_run=dry_run, bus=bus)
            results.append(job_result)

        return results

    def get_backup_summary(self, results: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Generate summary of run results.

        Args:
            results: List of job results

        Returns:
            Summary dictionary
        """
        successful_jobs = len([r for r in results if r.get('status') == 'completed'])
        failed_jobs = len([r for r in results if r.get('status') == 'failed'])

        return {
            'total_jobs': len(results),
            'successful_jobs': successful_jobs,
            'failed_jobs': failed_jobs,
            'total_files_copied': sum(r.get('files_copied', 0) for r in results),
            'total_files_relocated': sum(r.get('files_relocated', 0) for r in results),
            'total_bytes_copied': sum(r.get('bytes_copied', 0) for r in results),
            'total_errors': sum(len(r.get('errors', [])) for r in results),
            'backup_time': datetime.now().isoformat()
        }
