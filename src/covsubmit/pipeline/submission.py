"""Submission pipeline.

Ties the pieces of one run together: job metadata, parsing into the report
assembler, writing the JSON document and uploading it.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Mapping, Optional

from covsubmit.build.models import Module
from covsubmit.build.order import AggregationPlan
from covsubmit.config.models import CovsubmitConfig
from covsubmit.core.logging import get_logger
from covsubmit.http.client import CoverallsClient, SubmissionResult
from covsubmit.http.tls import TlsPolicy
from covsubmit.parsers.base import CoverageParser
from covsubmit.parsers.multiple import MultipleCoverageParser
from covsubmit.parsers.registry import create_parser, default_coverage_file
from covsubmit.report.assembler import MergePolicy, ReportAssembler
from covsubmit.report.job import detect_job
from covsubmit.report.writer import write_report
from covsubmit.sources.loader import SourceLoader

LOGGER = get_logger(__name__)

ClientFactory = Callable[[CovsubmitConfig], CoverallsClient]


def default_client_factory(config: CovsubmitConfig) -> CoverallsClient:
    """Create a CoverallsClient from configuration."""
    return CoverallsClient(
        config.coveralls_url,
        connect_timeout=config.timeouts.connect,
        read_timeout=config.timeouts.read,
        tls_policy=TlsPolicy.INSECURE if config.insecure_tls else TlsPolicy.VERIFY,
    )


class SubmissionPipeline:
    """Runs single-module or aggregate coverage submission."""

    def __init__(
        self,
        config: CovsubmitConfig,
        client_factory: Optional[ClientFactory] = None,
        env: Optional[Mapping[str, str]] = None,
    ) -> None:
        """Initialize SubmissionPipeline.

        Args:
            config: Loaded configuration.
            client_factory: Creates the Coveralls client (defaults to
                default_client_factory).
            env: Environment used for CI detection (defaults to os.environ).
        """
        self._config = config
        self._client_factory = client_factory or default_client_factory
        self._env = env

    @property
    def config(self) -> CovsubmitConfig:
        return self._config

    def coverage_file_for(self, module: Module) -> Path:
        """Report location of ``module`` for the configured format."""
        relative = self._config.coverage_file or default_coverage_file(self._config.format)
        return module.report_dir / relative

    def run_single(self, module: Module) -> Optional[SubmissionResult]:
        """Submit the coverage of a single module.

        Returns:
            The submission result, or None when skipped or in dry-run mode.
        """
        if module.is_aggregator:
            LOGGER.info(f"Skipping Coveralls for module '{module.name}' with packaging type 'pom'")
            return None

        source_loader = SourceLoader(module.source_roots, self._config.source_encoding)
        parser = create_parser(self._config.format, self.coverage_file_for(module), source_loader)
        return self._execute(parser, module.base_dir)

    def run_aggregate(self, plan: AggregationPlan) -> Optional[SubmissionResult]:
        """Submit the merged coverage of every module in ``plan``.

        Returns:
            The submission result, or None when this module does not trigger
            aggregation or in dry-run mode.
        """
        if not plan.triggered:
            LOGGER.info(
                f"Module '{plan.current.name}' is not the last module in build order, "
                "skipping aggregation"
            )
            return None

        if not plan.coverage_files:
            LOGGER.warning("No coverage reports found for any module")

        source_loader = SourceLoader(plan.source_roots, self._config.source_encoding)
        parsers = [
            create_parser(self._config.format, coverage_file, source_loader)
            for coverage_file in plan.coverage_files
        ]
        parser = MultipleCoverageParser(parsers, plan.base_dir)
        return self._execute(parser, plan.base_dir)

    def _execute(self, parser: CoverageParser, base_dir: Path) -> Optional[SubmissionResult]:
        job = detect_job(self._config, self._env)
        job.validate()

        assembler = ReportAssembler(MergePolicy(self._config.merge_policy))
        parser.parse(assembler)
        document = assembler.build_document(job)

        json_file = base_dir / self._config.json_file
        write_report(document, json_file)

        if self._config.dry_run:
            LOGGER.info(f"Dry run enabled, Coveralls report written to {json_file} but not submitted")
            return None

        with self._client_factory(self._config) as client:
            return client.submit(json_file)
