"""
MutexPromise tests

Covers construction, the resolver pair, continuation wiring and firing order,
and finally_.
"""

import asyncio

import pytest

from mutexpromise import (
    ExecutorNotCallableError,
    MutexPromise,
    PromiseState,
    Rejection,
    SelfResolutionError,
    UsageError,
)


class TestConstruction:
    """Test promise construction"""

    def test_new_promise_is_pending(self, context):
        """A fresh promise is pending and uncaught"""
        p = context.promise(lambda resolve, reject: None)

        assert isinstance(p, MutexPromise)
        assert p.state is PromiseState.PENDING
        assert p.is_pending
        assert p.resolution is None
        assert p.caught is False
        assert p.epoch == "test"

    def test_new_event_fires_before_executor(self, context, recorder):
        """'new' is emitted synchronously, before the executor runs"""
        seen = []

        def executor(resolve, reject):
            seen.append(recorder.count("new"))

        p = context.promise(executor)

        assert seen == [1]
        assert recorder.of("new") == [(p, ())]

    def test_non_callable_executor_raises(self, context, recorder):
        """Constructing without a callable executor is a usage error"""
        with pytest.raises(ExecutorNotCallableError, match="is not a function"):
            MutexPromise(None, context=context)

        assert recorder.count("new") == 0

    def test_usage_errors_are_type_errors(self, context):
        """Usage errors subclass TypeError"""
        with pytest.raises(TypeError):
            MutexPromise("not callable", context=context)
        assert issubclass(SelfResolutionError, UsageError)

    def test_executor_error_propagates(self, context):
        """An exception raised by the executor reaches the constructor's caller"""

        def executor(resolve, reject):
            raise RuntimeError("executor failed")

        with pytest.raises(RuntimeError, match="executor failed"):
            context.promise(executor)

    def test_capture_stacks(self, context, scheduler):
        """Stacks are recorded when enabled"""
        context.config.capture_stacks = True
        p = context.resolved(1)
        scheduler.run_until_idle()

        assert "test_capture_stacks" in p.creation_stack
        assert p.resolution_stack is not None

    def test_stacks_not_captured_by_default(self, context, scheduler):
        """No stacks are recorded by default"""
        p = context.resolved(1)
        scheduler.run_until_idle()

        assert p.creation_stack is None
        assert p.resolution_stack is None


class TestSettlement:
    """Test the resolver pair"""

    def test_resolve_is_deferred(self, deferred, scheduler):
        """resolve() schedules settlement instead of settling synchronously"""
        p, resolve, _ = deferred()
        resolve("x")

        assert p.is_pending
        scheduler.run_until_idle()
        assert p.is_fulfilled
        assert p.resolution == "x"

    def test_reject_is_deferred(self, deferred, scheduler):
        """reject() schedules settlement"""
        p, _, reject = deferred()
        error = ValueError("e")
        reject(error)

        assert p.is_pending
        scheduler.run_until_idle()
        assert p.is_rejected
        assert p.resolution is error

    def test_settles_at_most_once(self, deferred, scheduler):
        """Later resolve/reject calls do not change the outcome"""
        p, resolve, reject = deferred()
        resolve(1)
        resolve(2)
        reject("no")
        scheduler.run_until_idle()
        resolve(3)
        reject("still no")
        scheduler.run_all()

        assert p.is_fulfilled
        assert p.resolution == 1

    def test_resolve_with_self_raises(self, deferred, scheduler):
        """Self-resolution fails synchronously and leaves the promise pending"""
        p, resolve, reject = deferred()

        with pytest.raises(SelfResolutionError):
            resolve(p)
        with pytest.raises(SelfResolutionError):
            reject(p)

        scheduler.run_all()
        assert p.is_pending

    def test_settlement_events(self, context, scheduler, recorder):
        """resolve/reject events carry the value or reason"""
        ok = context.resolved("v")
        bad = context.rejected("r")
        bad.catch(lambda r: None)
        scheduler.run_until_idle()

        assert (ok, ("v",)) in recorder.of("resolve")
        assert (bad, ("r",)) in recorder.of("reject")

    def test_resolve_event_after_continuations(self, deferred, context, scheduler):
        """Continuations fire before the settlement event is emitted"""
        order = []
        p, resolve, _ = deferred()
        child = p.then(lambda v: order.append("handler"))
        context.subscribe(
            "resolve", lambda promise, value: promise is p and order.append("event")
        )

        resolve(1)
        scheduler.run_until_idle()

        assert order == ["handler", "event"]
        assert child.is_fulfilled


class TestThen:
    """Test continuation wiring"""

    def test_then_returns_new_promise(self, context, scheduler):
        """then() returns a distinct child, pending or settled upstream alike"""
        p = context.resolved(1)
        pending_child = p.then(lambda v: v)
        scheduler.run_until_idle()
        settled_child = p.then(lambda v: v)

        assert pending_child is not p
        assert settled_child is not p
        assert settled_child is not pending_child
        assert p in settled_child.ancestors

    def test_handler_never_runs_synchronously(self, context, scheduler):
        """Handlers on a settled promise still wait for the scheduler"""
        calls = []
        p = context.resolved(1)
        scheduler.run_until_idle()

        p.then(calls.append)
        assert calls == []

        scheduler.run_until_idle()
        assert calls == [1]

    def test_resolve_then_calls_handler_with_value(self, context, scheduler):
        """resolved(v).then(f) calls f(v)"""
        calls = []
        context.resolved({"x": "123"}).then(calls.append)
        assert calls == []

        scheduler.run_until_idle()
        assert calls == [{"x": "123"}]

    def test_executor_resolves_synchronously(self, context, scheduler, recorder):
        """A synchronously resolved executor chains into an upper-cased value"""
        d = context.promise(lambda resolve, reject: resolve("x"))
        assert recorder.count("new") == 1

        child = d.then(lambda v: v.upper())
        scheduler.run_until_idle()

        assert child.is_fulfilled
        assert child.resolution == "X"

    def test_registration_order(self, deferred, scheduler):
        """Continuations fire in registration order"""
        order = []
        p, resolve, _ = deferred()
        for n in range(5):
            p.then(lambda v, n=n: order.append(n))

        resolve(None)
        scheduler.run_until_idle()

        assert order == [0, 1, 2, 3, 4]
        assert p.continuations == []

    def test_handler_error_rejects_child(self, context, scheduler):
        """An exception inside a handler becomes the child's rejection"""
        error = ValueError("boom")

        def handler(value):
            raise error

        child = context.resolved(1).then(handler)
        child.catch(lambda r: None)
        scheduler.run_until_idle()

        assert child.is_rejected
        assert child.resolution is error

    def test_rejection_with_plain_reason(self, context, scheduler):
        """Raising Rejection rejects with the wrapped reason"""

        def handler(value):
            raise Rejection("plain reason")

        child = context.resolved(1).then(handler)
        child.catch(lambda r: None)
        scheduler.run_until_idle()

        assert child.resolution == "plain reason"

    def test_handler_cancellation_rejects_child(self, context, scheduler):
        """A handler raising CancelledError rejects the child"""
        error = asyncio.CancelledError()

        def handler(value):
            raise error

        child = context.resolved(1).then(handler)
        child.catch(lambda r: None)
        scheduler.run_all()

        assert child.is_rejected
        assert child.resolution is error

    def test_fulfillment_passes_through(self, context, scheduler):
        """Without an on_fulfilled handler the value passes through"""
        child = context.resolved("v").then(None, lambda r: "handled").then()
        scheduler.run_until_idle()

        assert child.is_fulfilled
        assert child.resolution == "v"

    def test_rejection_passes_through(self, context, scheduler):
        """Without an on_rejected handler the reason passes through to catch"""
        result = context.rejected("r").then(lambda v: "never").catch(lambda r: r)
        scheduler.run_until_idle()

        assert result.is_fulfilled
        assert result.resolution == "r"

    def test_catch_recovers(self, context, scheduler):
        """catch() handler return value fulfills the child"""
        child = context.rejected(KeyError("k")).catch(lambda r: "recovered")
        scheduler.run_until_idle()

        assert child.resolution == "recovered"

    def test_handler_returning_own_child_rejects(self, context, scheduler):
        """A handler resolving its own child rejects it with a usage error"""
        holder = {}
        child = context.resolved(1).then(lambda v: holder["child"])
        holder["child"] = child
        child.catch(lambda r: None)
        scheduler.run_until_idle()

        assert child.is_rejected
        assert isinstance(child.resolution, SelfResolutionError)

    def test_handler_returning_promise_is_adopted(self, context, scheduler):
        """A promise returned from a handler is assimilated"""
        child = context.resolved("a").then(lambda v: context.resolved(v + "b"))
        scheduler.run_until_idle()

        assert child.resolution == "ab"


class TestFinally:
    """Test finally_"""

    def test_taps_resolutions(self, context, scheduler):
        """The original value survives the tap"""
        val = {"x": "123"}
        called = []
        result = context.resolved(val).finally_(lambda: called.append(True) or "ignored")
        scheduler.run_until_idle()

        assert called == [True]
        assert result.is_fulfilled
        assert result.resolution is val

    def test_taps_rejections(self, context, scheduler):
        """The original reason survives the tap"""
        val = {"x": "123"}
        called = []
        result = context.rejected(val).finally_(lambda: called.append(True))
        result.catch(lambda r: None)
        scheduler.run_until_idle()

        assert called == [True]
        assert result.is_rejected
        assert result.resolution is val

    def test_tap_receives_no_arguments(self, context, scheduler):
        """tap() is called without arguments"""
        calls = []

        def tap(*args):
            calls.append(args)

        context.resolved(1).finally_(tap)
        scheduler.run_until_idle()

        assert calls == [()]

    def test_preserves_cancellation_reason(self, context, scheduler):
        """A CancelledError reason passes through the tap unchanged"""
        error = asyncio.CancelledError()
        result = context.rejected(error).finally_(lambda: None)
        caught = result.catch(lambda r: r)
        scheduler.run_all()

        assert result.is_rejected
        assert result.resolution is error
        assert caught.resolution is error

    def test_tap_failure_supersedes(self, context, scheduler):
        """An error raised by the tap becomes the new rejection"""
        error = RuntimeError("tap failed")

        def tap():
            raise error

        result = context.resolved(1).finally_(tap)
        result.catch(lambda r: None)
        scheduler.run_until_idle()

        assert result.is_rejected
        assert result.resolution is error

    def test_waits_for_thenable_tap(self, context, deferred, scheduler):
        """A thenable returned by the tap is waited for"""
        gate, open_gate, _ = deferred()
        result = context.resolved("v").finally_(lambda: gate)
        scheduler.run_until_idle()
        assert result.is_pending

        open_gate(None)
        scheduler.run_until_idle()
        assert result.resolution == "v"


class TestStaticConstructors:
    """Test resolved / rejected"""

    def test_resolved(self, context, scheduler):
        """resolved() fulfills with the value"""
        val = {"x": "123"}
        p = MutexPromise.resolved(val, context=context)
        scheduler.run_until_idle()

        assert p.resolution is val

    def test_resolved_adopts_promise(self, context, scheduler):
        """resolved(promise) adopts it and records it as an ancestor"""
        inner = context.resolved(3)
        outer = context.resolved(inner)
        scheduler.run_until_idle()

        assert inner in outer.ancestors
        assert outer.resolution == 3

    def test_rejected(self, context, scheduler):
        """rejected() rejects with the reason, caught by catch"""
        val = {"x": "123"}
        p = MutexPromise.rejected(val, context=context)
        caught = p.catch(lambda r: r)
        scheduler.run_until_idle()

        assert p.resolution is val
        assert caught.resolution is val

    def test_repr(self, context, scheduler):
        p = context.resolved(1)
        assert "pending" in repr(p)
        scheduler.run_until_idle()
        assert "fulfilled: 1" in repr(p)
