"""Declarative relevance rules.

Every rule pairs a predicate over a :class:`MatchContext` with an effect: either a
score delta or :data:`EXCLUDE`. Exclusions are evaluated first and short-circuit to
a zero score. Bonuses and penalties are then summed, floored at zero and clamped to
one. Predicates return an integer hit count so a rule such as ``framework-match``
can fire once per matching framework.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property
from typing import Callable, Dict, FrozenSet, Iterable, Mapping, Tuple, Union

from ..models import CandidateDocument, ContentType, ProjectSignature
from .terms import has_keyword, mentions, mentions_any, strip_extension, tokenize


class _Exclude:
    def __repr__(self) -> str:  # pragma: no cover - debugging aid
        return "EXCLUDE"


EXCLUDE = _Exclude()

Effect = Union[float, _Exclude]

WEB_FRAMEWORKS = ("next.js", "react", "vue.js", "angular", "nuxt", "remix", "gatsby", "astro")
MOBILE_FRAMEWORKS = ("react native", "expo", "flutter", "ionic", "capacitor")
MOBILE_MARKERS = ("react-native", "expo", "mobile", "native", "ios", "android")
CONTENT_FRAMEWORKS = ("astro", "starlight", "docusaurus", "gatsby", "hugo", "jekyll")
BACKEND_FRAMEWORKS = ("express", "fastify", "koa", "django", "flask", "rails", "spring", "laravel")
CLI_FRAMEWORKS = ("cli", "command", "commander", "yargs", "inquirer", "chalk")

WEB_FOREIGN_LANGUAGES = (
    "swift",
    "kotlin",
    "java",
    "dart",
    "flutter",
    "xamarin",
    "cpp",
    "c++",
    "rust",
    "go",
    "c#",
    "csharp",
)

CONTENT_ALLOW_LIST = ("astro", "typescript", "ts", "content", "markdown", "mcp")
CONTENT_IRRELEVANT = (
    "python",
    "swift",
    "kotlin",
    "cpp",
    "java",
    "ruby",
    "php",
    "go",
    "rust",
    "csharp",
    "nextjs",
    "react-native",
    "vue",
    "svelte",
    "trpc",
    "ecommerce",
    "enterprise",
    "clerk",
    "supabase",
    "fastapi",
    "flutter",
    "tauri",
    "swiftdata",
    "swiftui",
    "pysideui",
    "shadcnui",
    "docker",
    "kubernetes",
    "microservices",
    "deployment",
    "container",
)

FRONTEND_TERMS = ("next", "react", "vue", "angular")
PYTHON_TERMS = ("django", "flask", "fastapi", "python")
CLI_BOOST_KEYWORDS = ("node", "cli", "command", "typescript", "javascript", "express")
CLI_PENALTY_TERMS = ("react", "vue", "angular", "ui", "component", "clerk", "ecommerce", "supabase")
TECHNOLOGY_DIRECTORIES = ("technologies/", "stacks/", "languages/")


def _matches_any_framework(values: Iterable[str], names: Iterable[str]) -> bool:
    names = tuple(names)
    return any(mentions(tokenize(value), name) for value in values for name in names)


@dataclass(frozen=True)
class ProjectFlags:
    """Project-level classifications derived once per signature."""

    web: bool
    mobile: bool
    content: bool
    cli: bool
    javascript: bool
    python: bool
    technologies: FrozenSet[str]

    @classmethod
    def from_signature(cls, signature: ProjectSignature) -> "ProjectFlags":
        frameworks = signature.frameworks
        stack = signature.frameworks | signature.libraries
        mobile = _matches_any_framework(stack, MOBILE_FRAMEWORKS)
        web = any(
            _matches_any_framework([framework], WEB_FRAMEWORKS)
            and not _matches_any_framework([framework], ("react native",))
            for framework in frameworks
        )
        content = _matches_any_framework(frameworks, CONTENT_FRAMEWORKS) and not _matches_any_framework(
            frameworks, BACKEND_FRAMEWORKS
        )
        project_type = (signature.project_type or "").lower()
        cli = _matches_any_framework(stack, CLI_FRAMEWORKS) or "cli" in tokenize(project_type)
        languages = {language.lower() for language in signature.languages}
        return cls(
            web=web,
            mobile=mobile,
            content=content,
            cli=cli,
            javascript=bool(languages & {"javascript", "typescript"}),
            python="python" in languages,
            technologies=signature.technologies(),
        )


@dataclass(frozen=True)
class MatchContext:
    """Everything a rule predicate may look at for one candidate."""

    candidate: CandidateDocument
    signature: ProjectSignature
    flags: ProjectFlags

    @cached_property
    def stem(self) -> str:
        return strip_extension(self.candidate.name).lower()

    @cached_property
    def name_tokens(self):
        return tokenize(self.stem)

    @cached_property
    def path(self) -> str:
        return (self.candidate.path or "").lower()

    @cached_property
    def tokens(self):
        """Words of the path and file name together."""
        if self.candidate.name.lower() in self.path:
            return tokenize(strip_extension(self.path))
        return tokenize(strip_extension(self.path)) + self.name_tokens

    def mentions(self, term: str) -> bool:
        return mentions(self.tokens, term)

    def name_keyword(self, *keywords: str) -> bool:
        return any(has_keyword(self.name_tokens, keyword) for keyword in keywords)

    def detected(self, term: str) -> bool:
        """True when the project's own stack names ``term``."""
        return any(mentions(tokenize(technology), term) for technology in self.flags.technologies)

    def mentions_undetected(self, terms: Iterable[str]) -> bool:
        return any(self.mentions(term) and not self.detected(term) for term in terms)

    def count_mentions(self, values: Iterable[str]) -> int:
        return sum(1 for value in sorted(values) if self.mentions(value))


Predicate = Callable[[MatchContext], int]


@dataclass(frozen=True)
class ScoringRule:
    name: str
    effect: Effect
    predicate: Predicate

    @property
    def excludes(self) -> bool:
        return self.effect is EXCLUDE


def _is(content_type: ContentType) -> Predicate:
    return lambda ctx: ctx.candidate.content_type is content_type


def _mobile_in_web(ctx: MatchContext) -> int:
    return ctx.flags.web and not ctx.flags.mobile and mentions_any(ctx.tokens, MOBILE_MARKERS)


def _foreign_language_in_web(ctx: MatchContext) -> int:
    return ctx.flags.web and ctx.mentions_undetected(WEB_FOREIGN_LANGUAGES)


def _outside_content_stack(ctx: MatchContext) -> int:
    if not ctx.flags.content:
        return False
    stem = ctx.stem
    allowed = (
        mentions_any(ctx.name_tokens, CONTENT_ALLOW_LIST)
        or "common-errors" in stem
        or "project-context" in stem
        or stem.startswith("0")
    )
    return not allowed and ctx.mentions_undetected(CONTENT_IRRELEVANT)


def _core_rule(ctx: MatchContext) -> int:
    return (
        ctx.candidate.content_type is ContentType.RULE
        and ctx.stem.startswith("0")
        and ctx.name_keyword("core")
    )


def _universal_context(ctx: MatchContext) -> int:
    return "common-errors" in ctx.stem or "project-context" in ctx.stem


def _javascript_ecosystem(ctx: MatchContext) -> int:
    return ctx.flags.javascript and mentions_any(ctx.name_tokens, ("javascript", "node.js"))


def _framework_hits(ctx: MatchContext) -> int:
    return ctx.count_mentions(ctx.signature.frameworks)


def _library_hits(ctx: MatchContext) -> int:
    return ctx.count_mentions(ctx.signature.libraries)


def _language_hits(ctx: MatchContext) -> int:
    return ctx.count_mentions(ctx.signature.languages)


def _special_hits(terms: Tuple[str, ...]) -> Predicate:
    def predicate(ctx: MatchContext) -> int:
        return sum(1 for term in terms if ctx.detected(term) and ctx.mentions(term))

    return predicate


def _typescript_boost(ctx: MatchContext) -> int:
    has_typescript = any(language.lower() == "typescript" for language in ctx.signature.languages)
    return has_typescript and mentions(ctx.name_tokens, "typescript")


def _pairing(ctx: MatchContext) -> int:
    named = {
        technology.lower()
        for technology in ctx.flags.technologies
        if technology not in ctx.signature.languages and ctx.mentions(technology)
    }
    return len(named) >= 2


def _mobile_boost(ctx: MatchContext) -> int:
    return (
        ctx.flags.mobile
        and not ctx.flags.web
        and mentions_any(ctx.name_tokens, ("react-native", "expo", "mobile"))
    )


def _enterprise_scale(ctx: MatchContext) -> int:
    return ctx.signature.project_size.value == "enterprise" and ctx.name_keyword("enterprise")


def _complexity_tag(ctx: MatchContext) -> int:
    return mentions(ctx.name_tokens, ctx.signature.complexity.value)


def _size_tag(ctx: MatchContext) -> int:
    return mentions(ctx.name_tokens, ctx.signature.project_size.value)


def _technology_directory(ctx: MatchContext) -> int:
    in_directory = any(directory in ctx.path for directory in TECHNOLOGY_DIRECTORIES)
    return in_directory and any(ctx.mentions(technology) for technology in ctx.flags.technologies)


def _cli_boost(ctx: MatchContext) -> int:
    return ctx.flags.cli and ctx.name_keyword(*CLI_BOOST_KEYWORDS)


def _cli_penalty(ctx: MatchContext) -> int:
    return ctx.flags.cli and ctx.mentions_undetected(CLI_PENALTY_TERMS)


def _frontend_without_javascript(ctx: MatchContext) -> int:
    return not ctx.flags.javascript and ctx.mentions_undetected(FRONTEND_TERMS)


def _python_without_python(ctx: MatchContext) -> int:
    return not ctx.flags.python and ctx.mentions_undetected(PYTHON_TERMS)


DEFAULT_WEIGHTS: Dict[str, float] = {
    "command-baseline": 0.1,
    "command-development": 0.7,
    "command-workflow": 0.6,
    "command-git": 0.5,
    "command-verification": 0.4,
    "core-rule": 0.8,
    "mcp": 0.3,
    "universal-context": 0.6,
    "javascript-ecosystem": 0.5,
    "framework-match": 0.8,
    "ui-kit-match": 0.8,
    "radix-match": 0.7,
    "stack-integration": 0.9,
    "enterprise-scale": 0.7,
    "mobile-boost": 0.7,
    "language-match": 0.6,
    "typescript-boost": 0.3,
    "library-match": 0.7,
    "technology-pairing": 0.9,
    "complexity-tag": 0.1,
    "size-tag": 0.1,
    "technology-directory": 0.5,
    "cli-boost": 0.8,
    "assistant-directory": 0.2,
    "tooling-directory": 0.3,
    "cli-ui-penalty": -0.6,
    "frontend-without-javascript": -0.6,
    "python-without-python": -0.6,
}


def build_rules(overrides: Mapping[str, float] | None = None) -> Tuple[ScoringRule, ...]:
    """Return the ordered rule table, applying weight overrides by rule name."""
    weights = dict(DEFAULT_WEIGHTS)
    for name, value in (overrides or {}).items():
        if name not in weights:
            raise ValueError(f"Unknown scoring rule: {name}")
        weights[name] = float(value)

    def bonus(name: str, predicate: Predicate) -> ScoringRule:
        return ScoringRule(name=name, effect=weights[name], predicate=predicate)

    is_command = _is(ContentType.COMMAND)
    return (
        ScoringRule("mobile-in-web-project", EXCLUDE, _mobile_in_web),
        ScoringRule("foreign-language-in-web-project", EXCLUDE, _foreign_language_in_web),
        ScoringRule("outside-content-stack", EXCLUDE, _outside_content_stack),
        bonus("command-baseline", is_command),
        bonus(
            "command-development",
            lambda ctx: is_command(ctx) and ctx.name_keyword("develop", "debug", "review"),
        ),
        bonus("command-workflow", lambda ctx: is_command(ctx) and ctx.name_keyword("workflow", "quality")),
        bonus("command-git", lambda ctx: is_command(ctx) and ctx.name_keyword("git", "commit", "pr")),
        bonus(
            "command-verification",
            lambda ctx: is_command(ctx) and ctx.name_keyword("test", "security", "audit"),
        ),
        bonus("core-rule", _core_rule),
        bonus("mcp", lambda ctx: ctx.name_keyword("mcp")),
        bonus("universal-context", _universal_context),
        bonus("javascript-ecosystem", _javascript_ecosystem),
        bonus("framework-match", _framework_hits),
        bonus("ui-kit-match", _special_hits(("tailwind", "shadcn"))),
        bonus("radix-match", _special_hits(("radix",))),
        bonus("stack-integration", _special_hits(("supabase", "next.js"))),
        bonus("enterprise-scale", _enterprise_scale),
        bonus("mobile-boost", _mobile_boost),
        bonus("language-match", _language_hits),
        bonus("typescript-boost", _typescript_boost),
        bonus("library-match", _library_hits),
        bonus("technology-pairing", _pairing),
        bonus("complexity-tag", _complexity_tag),
        bonus("size-tag", _size_tag),
        bonus("technology-directory", _technology_directory),
        bonus("cli-boost", _cli_boost),
        bonus("assistant-directory", lambda ctx: "assistants/" in ctx.path),
        bonus("tooling-directory", lambda ctx: "tools/" in ctx.path or "tasks/" in ctx.path),
        bonus("cli-ui-penalty", _cli_penalty),
        bonus("frontend-without-javascript", _frontend_without_javascript),
        bonus("python-without-python", _python_without_python),
    )


__all__ = [
    "DEFAULT_WEIGHTS",
    "EXCLUDE",
    "MatchContext",
    "ProjectFlags",
    "ScoringRule",
    "build_rules",
]
