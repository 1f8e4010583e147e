"""Performance benchmark suite for the audit pipeline.

Measures:
- Line indexing on large files
- Pattern matching throughput
- Full audit throughput over a generated workspace

Timing assertions are deliberately loose; the suite guards against
accidental quadratic behaviour, not against slow CI machines.
"""

import time
from dataclasses import dataclass
from typing import Any, Callable

import pytest

from shipcheck.agents import AuditOrchestrator
from shipcheck.audit.matcher import LineIndex, PatternMatcher
from shipcheck.audit.rules import RuleRegistry
from shipcheck.config import AuditSettings
from shipcheck.models import SourceFile


@dataclass
class BenchmarkResult:
    """Result of a benchmark run."""

    name: str
    iterations: int
    total_time: float
    avg_time: float
    min_time: float
    max_time: float
    metadata: dict[str, Any]

    def __str__(self) -> str:
        return (
            f"{self.name}:\n"
            f"  Iterations: {self.iterations}\n"
            f"  Total: {self.total_time:.3f}s\n"
            f"  Avg: {self.avg_time*1000:.2f}ms\n"
            f"  Min: {self.min_time*1000:.2f}ms\n"
            f"  Max: {self.max_time*1000:.2f}ms"
        )


def benchmark(name: str, func: Callable, iterations: int = 10, warmup: int = 1, **kwargs) -> BenchmarkResult:
    """Run a synchronous benchmark."""
    for _ in range(warmup):
        func(**kwargs)

    times = []
    for _ in range(iterations):
        start = time.perf_counter()
        func(**kwargs)
        times.append(time.perf_counter() - start)

    total_time = sum(times)
    return BenchmarkResult(
        name=name,
        iterations=iterations,
        total_time=total_time,
        avg_time=total_time / iterations,
        min_time=min(times),
        max_time=max(times),
        metadata={k: type(v).__name__ for k, v in kwargs.items()},
    )


def _large_script(lines: int) -> str:
    body = [f"const value{i} = compute({i});" for i in range(lines)]
    body[lines // 2] = "console.log('http://cdn.example.com/asset.js');"
    return "\n".join(body)


class TestLineIndexBenchmarks:
    """Offset -> line lookups on large inputs."""

    def test_large_file_lookups(self):
        text = _large_script(200_000)
        index = LineIndex(text)

        assert index.line_count == 200_000
        assert index.line_of(len(text) - 1) == 200_000

        result = benchmark(
            "line_of x 10k",
            lambda: [index.line_of(offset) for offset in range(0, len(text), len(text) // 10_000)],
        )
        print(f"\n{result}")
        assert result.avg_time < 1.0


class TestMatcherBenchmarks:
    """Pattern matching throughput."""

    def test_large_file_matching(self, registry: RuleRegistry):
        source = SourceFile(path="big.js", content=_large_script(50_000))
        rules = [registry.get("http-url"), registry.get("observability-failure")]

        matches = PatternMatcher().match(source, rules)
        assert [(m.rule.rule_id, m.line) for m in matches] == [
            ("http-url", 25_001),
            ("observability-failure", 25_001),
        ]

        result = benchmark("match 50k lines", PatternMatcher().match, source=source, rules=rules)
        print(f"\n{result}")
        assert result.avg_time < 5.0

    def test_long_word_run_is_linear(self, registry: RuleRegistry):
        source = SourceFile(
            path="img.js",
            content='const logo = "data:image/png;base64,' + "A" * 200_000 + '";\n',
        )
        rules = [registry.get("env-isolation")]

        result = benchmark("secret scan over 200k word chars", PatternMatcher().match, iterations=3, source=source, rules=rules)
        print(f"\n{result}")
        assert PatternMatcher().match(source, rules) == []
        assert result.max_time < 1.0


class TestAuditBenchmarks:
    """End-to-end audit throughput."""

    @pytest.mark.asyncio
    async def test_workspace_audit(self, settings: AuditSettings):
        files = [
            SourceFile(path=f"src/module_{i}.js", content=_large_script(200))
            for i in range(100)
        ]
        orchestrator = AuditOrchestrator(settings=settings)

        start = time.perf_counter()
        report = await orchestrator.run(files)
        elapsed = time.perf_counter() - start

        print(f"\nAudited {len(files)} files in {elapsed:.2f}s")
        assert len(report.findings) == 200
        assert elapsed < 60.0
