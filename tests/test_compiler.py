"""Unit tests for actionqa.engine.compiler — Compiler."""

from __future__ import annotations

import pytest

from actionqa.engine.actions import CompositeAction, WaitAction
from actionqa.engine.compiler import Compiler
from actionqa.engine.errors import CompilationError


class TestCompiler:
    def test_init_collects_added_steps(self):
        compiler = Compiler()
        root = CompositeAction("root", lambda: (compiler.add(WaitAction(1)), compiler.add(WaitAction(2))))
        compiler.init(root)
        assert [s.duration_ms for s in root.steps] == [1, 2]

    def test_is_compiling_only_during_init(self):
        compiler = Compiler()
        seen = []
        compiler.init(CompositeAction("root", lambda: seen.append(compiler.is_compiling)))
        assert seen == [True]
        assert compiler.is_compiling is False

    def test_recompile_is_idempotent(self):
        compiler = Compiler()
        root = CompositeAction("root", lambda: compiler.add(WaitAction(5)))
        compiler.init(root)
        first = root.to_json()["steps"]
        compiler.init(root)
        second = root.to_json()["steps"]
        assert len(root.steps) == 1
        assert [s["description"] for s in first] == [s["description"] for s in second]

    def test_recompile_builds_fresh_step_instances(self):
        compiler = Compiler()
        root = CompositeAction("root", lambda: compiler.add(WaitAction(5)))
        compiler.init(root)
        before = root.steps[0]
        compiler.init(root)
        assert root.steps[0] is not before

    def test_nested_compile_restores_pointer(self):
        compiler = Compiler()
        inner = CompositeAction("inner", lambda: compiler.add(WaitAction(1)))

        def outer_steps():
            compiler.add(WaitAction(0))
            compiler.add(inner)
            compiler.compile(inner)
            compiler.add(WaitAction(2))

        outer = CompositeAction("outer", outer_steps)
        compiler.init(outer)
        assert [s.description for s in outer.steps] == ["Wait 0 milliseconds", "inner", "Wait 2 milliseconds"]
        assert len(inner.steps) == 1
        assert compiler.current is None

    def test_pointer_restored_when_steps_fn_raises(self):
        compiler = Compiler()

        def broken():
            raise RuntimeError("bad steps")

        with pytest.raises(RuntimeError):
            compiler.init(CompositeAction("root", broken))
        assert compiler.current is None
        assert compiler.is_compiling is False

    def test_add_outside_compilation_raises(self):
        with pytest.raises(CompilationError, match="no task or test is being compiled"):
            Compiler().add(WaitAction(1))
