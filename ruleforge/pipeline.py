"""End-to-end generation: analyse, score, select, adapt and write."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from .adapters import AdaptContext, RuleAdapter
from .analysis import RepoScanner, StackDetector
from .config import CONFIG_FILENAME, ConfigError, RuleForgeConfig, load_config
from .disambiguation import Disambiguation, disambiguate
from .fetching import ContentTree, GitHubContentTree, LocalContentTree, discover_candidates, fetch_bodies
from .frontmatter import standardize, template_variables
from .integrations import detect_integrations
from .logging import get_logger, log_failure
from .models import AdaptationResult, AdaptedArtifact, DetectedIntegration, ScoredCandidate, StandardizedRule
from .platforms import DEFAULT_REGISTRY, GENERIC, PlatformRegistry
from .scoring import RelevanceScorer
from .selection import TemplateSelector
from .signature import extract_signature
from .validation import ValidationReport, validate_rules
from .writer import ArtifactWriter, WriteReport

TreeFactory = Callable[[RuleForgeConfig], ContentTree]


class NothingToAdaptError(RuntimeError):
    """Raised when the content tree offers no candidate documents."""


@dataclass
class GenerationSummary:
    """What a generation run did, per platform and overall."""

    root: Path
    dry_run: bool = False
    primary: Optional[str] = None
    ambiguous: bool = False
    disambiguation_reason: Optional[str] = None
    detected: List[DetectedIntegration] = field(default_factory=list)
    selected: Dict[str, int] = field(default_factory=dict)
    fetch_failures: List[str] = field(default_factory=list)
    validation: ValidationReport = field(default_factory=ValidationReport)
    results: List[AdaptationResult] = field(default_factory=list)
    platform_errors: Dict[str, str] = field(default_factory=dict)
    write: WriteReport = field(default_factory=WriteReport)
    reason: Optional[str] = None

    @property
    def artifacts(self) -> List[AdaptedArtifact]:
        return [artifact for result in self.results for artifact in result.artifacts]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "root": str(self.root),
            "dry_run": self.dry_run,
            "primary": self.primary,
            "ambiguous": self.ambiguous,
            "disambiguation_reason": self.disambiguation_reason,
            "detected": [
                {"platform": item.platform_id, "confidence": item.confidence.value}
                for item in self.detected
            ],
            "selected": dict(self.selected),
            "fetch_failures": list(self.fetch_failures),
            "validation_issues": len(self.validation.issues),
            "platforms": [
                {
                    "platform": result.summary.platform_id,
                    "generated": result.summary.generated,
                    "skipped": result.summary.skipped,
                    "truncated": result.summary.truncated,
                    "reason": result.summary.reason,
                }
                for result in self.results
            ],
            "platform_errors": dict(self.platform_errors),
            "written": [str(path) for path in self.write.written],
            "planned": [str(path) for path in self.write.planned],
            "write_failures": [str(failure.path) for failure in self.write.failures],
            "reason": self.reason,
        }


def default_tree(config: RuleForgeConfig) -> ContentTree:
    source = config.source
    if source.path is not None:
        return LocalContentTree(source.path)
    if source.repository:
        return GitHubContentTree.from_environment(
            source.repository, ref=source.ref, token_env=source.token_env
        )
    raise ConfigError(
        f"No blueprint source configured; set source.path or source.repository in {CONFIG_FILENAME}"
    )


def blueprint_platform_config(
    rules: Sequence[StandardizedRule],
    platform_id: str,
    registry: PlatformRegistry = DEFAULT_REGISTRY,
) -> Dict[str, Any]:
    """Merge the ``platforms.<id>`` frontmatter blocks of ``rules``, later rules winning.

    Keys may use any alias of the platform (``claude`` for ``claude-code``).
    """
    merged: Dict[str, Any] = {}
    for rule in rules:
        blocks = rule.frontmatter.get("platforms")
        if not isinstance(blocks, Mapping):
            continue
        for key, block in blocks.items():
            if isinstance(block, Mapping) and registry.resolve(str(key)) == platform_id:
                merged.update(block)
    return merged


class GenerationPipeline:
    """Runs one generation pass for a project directory."""

    def __init__(
        self,
        *,
        registry: PlatformRegistry = DEFAULT_REGISTRY,
        stack_detector: StackDetector | None = None,
        adapter: RuleAdapter | None = None,
        tree_factory: TreeFactory = default_tree,
        home: Path | None = None,
        environment: Mapping[str, str] | None = None,
    ) -> None:
        self.registry = registry
        self.stack_detector = stack_detector or StackDetector(RepoScanner())
        self.adapter = adapter or RuleAdapter(registry)
        self.tree_factory = tree_factory
        self.home = home
        self.environment = environment
        self.logger = get_logger("pipeline")

    def run(
        self,
        path: str | Path,
        *,
        dry_run: bool = False,
        platform: str | None = None,
        source: str | Path | None = None,
    ) -> GenerationSummary:
        root = Path(path).expanduser().resolve()
        if not root.is_dir():
            raise FileNotFoundError(f"Project directory not found: {root}")
        config = load_config(root / CONFIG_FILENAME)
        if source is not None:
            config.source.path = Path(source).expanduser().resolve()
        self.logger.info("Starting generation for %s", root)

        summary = GenerationSummary(root=root, dry_run=dry_run)
        analysis = self.stack_detector.analyze(root)
        signature = extract_signature(analysis)
        project_name = str(analysis.get("projectName") or root.name)
        self.logger.debug("Project signature: %s", signature.to_dict())

        targets = self._targets(root, config, platform, summary)
        if not targets:
            summary.reason = summary.reason or "No capability for any detected platform"
            self.logger.warning(summary.reason)
            return summary

        tree = self.tree_factory(config)
        candidates = discover_candidates(tree, config.content_types, platform_id=targets[0])
        if not candidates:
            raise NothingToAdaptError("No blueprint documents found in the content source")

        scorer = RelevanceScorer(config.scoring, max_workers=config.concurrency.score_workers)
        selector = TemplateSelector(config.selection)
        scored = scorer.score_all(candidates, signature)

        chosen: List[ScoredCandidate] = []
        for content_type in config.content_types:
            rule_set = selector.select(scored, content_type)
            summary.selected[content_type.value] = len(rule_set)
            chosen.extend(rule_set.items)
            self.logger.info("Selected %d %s document(s)", len(rule_set), content_type.value)

        fetched = fetch_bodies(
            tree,
            [item.candidate for item in chosen],
            max_workers=config.concurrency.fetch_workers,
        )
        summary.fetch_failures = [failure.candidate.path for failure in fetched.failures]
        scores = {item.path: item.relevance_score for item in chosen}
        variables = template_variables(signature, project_name)
        rules: List[StandardizedRule] = [
            standardize(
                document,
                document.raw_content or "",
                variables,
                relevance_score=scores.get(document.path, 0.0),
            )
            for document in fetched.documents
        ]
        rules, summary.validation = validate_rules(rules, required=config.validation.required)

        context = AdaptContext(
            project_root=root,
            home_dir=self.home if self.home is not None else Path.home(),
            signature=signature,
            project_name=project_name,
        )
        summary.results = self._adapt_all(rules, targets, context, config, summary)

        writer = ArtifactWriter(dry_run=dry_run)
        summary.write = writer.write(summary.artifacts)
        if summary.write.written:
            self.logger.info("Wrote %d artifact(s)", len(summary.write.written))
        return summary

    def detect(self, path: str | Path) -> Tuple[List[DetectedIntegration], Disambiguation]:
        """Detected integrations and the primary platform for ``path``."""
        root = Path(path).expanduser().resolve()
        config = load_config(root / CONFIG_FILENAME)
        detected = detect_integrations(
            root, home=self.home, environment=self.environment, registry=self.registry
        )
        return detected, disambiguate(detected, config.platform, self.registry)

    def _targets(
        self,
        root: Path,
        config: RuleForgeConfig,
        platform: str | None,
        summary: GenerationSummary,
    ) -> List[str]:
        if platform:
            platform_id = self.registry.resolve(platform)
            if platform_id is None:
                summary.reason = f"No capability for platform '{platform}'"
                return []
            summary.primary = platform_id
            summary.disambiguation_reason = "Requested on the command line"
            return [platform_id]

        detected, choice = self.detect(root)
        summary.detected = detected
        if choice.platform_id is None:
            self.logger.info("No platforms detected; using %s", GENERIC.name)
            summary.primary = GENERIC.id
            summary.disambiguation_reason = choice.reason
            return [GENERIC.id]

        summary.primary = choice.platform_id
        summary.ambiguous = choice.ambiguous
        summary.disambiguation_reason = choice.reason
        self.logger.info("Primary platform: %s (%s)", choice.platform_id, choice.reason)
        targets = [choice.platform_id]
        for item in detected:
            platform_id = self.registry.resolve(item.platform_id)
            if platform_id and platform_id not in targets:
                targets.append(platform_id)
        return targets

    def _adapt_all(
        self,
        rules: Sequence[StandardizedRule],
        targets: Sequence[str],
        context: AdaptContext,
        config: RuleForgeConfig,
        summary: GenerationSummary,
    ) -> List[AdaptationResult]:
        def _adapt(platform_id: str) -> Tuple[str, Optional[AdaptationResult], Optional[str]]:
            platform_config = blueprint_platform_config(rules, platform_id, self.registry)
            platform_config.update(config.platforms.get(platform_id, {}))
            try:
                return platform_id, self.adapter.adapt(rules, platform_id, context, platform_config), None
            except Exception as exc:  # isolate one platform's failure from the others
                log_failure(self.logger, f"Adapting for {platform_id} failed", exc)
                return platform_id, None, str(exc) or exc.__class__.__name__

        workers = max(1, min(config.concurrency.adapt_workers, len(targets)))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            outcomes = list(executor.map(_adapt, targets))

        results: List[AdaptationResult] = []
        for platform_id, result, error in outcomes:
            if error is not None or result is None:
                summary.platform_errors[platform_id] = error or "no result"
                continue
            results.append(result)
        return results


__all__ = [
    "GenerationPipeline",
    "GenerationSummary",
    "NothingToAdaptError",
    "blueprint_platform_config",
    "default_tree",
]
