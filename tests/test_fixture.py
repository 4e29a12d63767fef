"""Tests for the Fixture facade."""

import threading
from dataclasses import dataclass, field

import pytest
from pydantic import BaseModel, field_validator

from specimen.config import EngineConfig, GeneratorConfig, SpecimenConfig
from specimen.core.behaviors import (
    Behavior,
    ExceptionToNoSpecimenBehavior,
    NullOnRecursion,
    RecursionGuardBehavior,
    TracingBehavior,
)
from specimen.core.builder import FixedBuilder, FunctionBuilder
from specimen.core.customization import Customization, MemberValueCustomization
from specimen.core.errors import (
    CannotConstructError,
    ConfigurationError,
    CycleDetectedError,
    GraphMutationError,
    UnresolvableRequestError,
)
from specimen.core.requests import MemberRequest, TypeRequest
from specimen.core.specimen import NoSpecimen, OmitSpecimen
from specimen.fixture import Fixture


@dataclass
class Node:
    value: int
    next: "Node | None" = None


@dataclass
class Tree:
    name: str
    children: "list[Tree]" = field(default_factory=list)


@dataclass
class Parent:
    child: "Child"


@dataclass
class Child:
    parent: Parent


class ModelNode(BaseModel):
    name: str
    child: "ModelNode"


class Ticket(BaseModel):
    code: str

    @field_validator("code")
    @classmethod
    def code_has_prefix(cls, value: str) -> str:
        if not value.startswith("T-"):
            raise ValueError("code must start with T-")
        return value


@dataclass
class Money:
    amount: int
    currency: str


@dataclass
class Invoice:
    number: str
    total: Money


class Clock:
    def __init__(self, offset: int, zone: str = "UTC"):
        self.offset = offset
        self.zone = zone


@dataclass
class Alarm:
    label: str
    clock: Clock


class Marker:
    pass


def only(tp, value):
    """Function builder answering TypeRequest(tp) with ``value``."""

    def build(request, context):
        if isinstance(request, TypeRequest) and request.type is tp:
            return value
        return NoSpecimen

    return build


class TestCreate:
    def test_create_scalar(self, fixture):
        assert isinstance(fixture.create(int), int)

    def test_create_many_uses_repeat_count(self, fixture):
        assert len(fixture.create_many(str)) == 3
        assert len(fixture.create_many(str, count=5)) == 5
        assert fixture.create_many(str, count=0) == []

    def test_repeat_count_from_config(self):
        fixture = Fixture(SpecimenConfig(engine=EngineConfig(repeat_count=5)), seed=1)
        assert len(fixture.create(list[int])) == 5

    def test_unresolvable_request_is_reported(self, fixture):
        with pytest.raises(UnresolvableRequestError) as exc_info:
            fixture.create(Clock)
        assert exc_info.value.request == TypeRequest(Clock)
        assert "Clock" in str(exc_info.value)
        assert exc_info.value.path == ()

    def test_unresolvable_member_is_named_in_the_path(self, fixture):
        with pytest.raises(UnresolvableRequestError) as exc_info:
            fixture.create(Alarm)
        error = exc_info.value
        assert error.request == TypeRequest(Alarm)
        assert error.path[0] == TypeRequest(Alarm)
        assert error.path[-1] == TypeRequest(Clock)
        assert "Request path" in str(error)

    def test_failure_path_is_per_call(self, fixture):
        with pytest.raises(UnresolvableRequestError):
            fixture.create(Alarm)
        with pytest.raises(UnresolvableRequestError) as exc_info:
            fixture.create(Clock)
        assert exc_info.value.path == ()

    def test_model_that_rejects_generated_values(self, fixture):
        with pytest.raises(CannotConstructError) as exc_info:
            fixture.create(Ticket)
        assert exc_info.value.request == TypeRequest(Ticket)
        assert "T-" in str(exc_info.value)

    def test_model_accepts_customized_values(self, fixture):
        fixture.customize(MemberValueCustomization({"code": "T-1"}, owner=Ticket))
        assert fixture.create(Ticket).code == "T-1"

    def test_resolve_returns_no_specimen_unchanged(self, fixture):
        assert fixture.resolve(TypeRequest(Clock)) is NoSpecimen

    def test_seed_from_config(self):
        config = SpecimenConfig(generator=GeneratorConfig(seed=99))
        assert Fixture(config).seed == 99
        assert Fixture(config, seed=5).seed == 5

    def test_same_seed_same_values(self):
        first = Fixture(SpecimenConfig(), seed=3).create(Invoice)
        second = Fixture(SpecimenConfig(), seed=3).create(Invoice)
        assert first == second


class TestRecursion:
    """Self-referencing shapes fail with a cycle, or are cut off when configured."""

    def test_self_reference_raises_cycle(self, fixture):
        with pytest.raises(CycleDetectedError) as exc_info:
            fixture.create(Node)
        assert exc_info.value.request == TypeRequest(Node)
        assert exc_info.value.path[0] == TypeRequest(Node)

    def test_cycle_is_deterministic(self, fixture):
        for _ in range(3):
            with pytest.raises(CycleDetectedError):
                fixture.create(Node)

    def test_cycle_is_not_unresolvable(self, fixture):
        with pytest.raises(CycleDetectedError) as exc_info:
            fixture.create(Parent)
        assert not isinstance(exc_info.value, UnresolvableRequestError)

    def test_omit_keeps_defaults(self, omitting_fixture):
        node = omitting_fixture.create(Node)
        assert isinstance(node.value, int)
        assert node.next is None

    def test_omit_empties_recursive_collections(self, omitting_fixture):
        tree = omitting_fixture.create(Tree)
        assert tree.children == []

    def test_omit_without_default_assigns_none(self, omitting_fixture):
        parent = omitting_fixture.create(Parent)
        assert isinstance(parent.child, Child)
        assert parent.child.parent is None

    def test_omitted_required_model_member_is_none(self, omitting_fixture):
        node = omitting_fixture.create(ModelNode)
        assert isinstance(node, ModelNode)
        assert isinstance(node.name, str)
        assert node.child is None

    def test_null_handler_by_name(self, fixture):
        fixture.set_recursion_handler("null")
        assert fixture.create(Node).next is None

    def test_deeper_recursion(self, fixture):
        fixture.set_recursion_handler(NullOnRecursion(), depth=2)
        node = fixture.create(Node)
        assert isinstance(node.next, Node)
        assert node.next.next is None

    def test_inject_breaks_the_cycle(self, fixture):
        fixture.inject(None, as_type=Node | None)
        assert fixture.create(Node).next is None


class TestConfiguration:
    def test_inject_takes_precedence(self, fixture):
        fixture.inject(42)
        assert fixture.create(int) == 42
        assert fixture.create(Money).amount == 42

    def test_later_injection_wins(self, fixture):
        fixture.inject("first")
        fixture.inject("second")
        assert fixture.create(str) == "second"

    def test_register_resolves_factory_parameters(self, fixture):
        fixture.inject(3)
        fixture.register(Clock, Clock)
        clock = fixture.create(Clock)
        assert clock.offset == 3
        assert clock.zone.startswith("zone")

    def test_register_with_function(self, fixture):
        fixture.register(Money, lambda: Money(10, "EUR"))
        assert fixture.create(Invoice).total == Money(10, "EUR")

    def test_freeze_returns_the_same_value(self, fixture):
        money = fixture.freeze(Money)
        assert fixture.create(Money) is money
        assert fixture.create(Invoice).total is money

    def test_add_builder_precedes_engine(self, fixture):
        fixture.add_builder(only(int, -1))
        assert fixture.create(int) == -1

    def test_add_builder_order_is_priority(self, fixture):
        fixture.add_builder(only(int, 1))
        fixture.add_builder(only(int, 2))
        assert fixture.create(int) == 1
        fixture.add_builder(only(int, 3), first=True)
        assert fixture.create(int) == 3

    def test_customizations_precede_builders(self, fixture):
        fixture.add_builder(only(int, 1))
        fixture.inject(2)
        assert fixture.create(int) == 2

    def test_remove_builder(self, fixture):
        builder = fixture.add_builder(only(int, -1))
        fixture.remove_builder(builder)
        assert fixture.create(int) != -1

    def test_residue_is_consulted_last(self, fixture):
        fixture.add_residue(only(Clock, Clock(0)))
        fixture.add_residue(only(int, -1))
        assert fixture.create(Clock).offset == 0
        assert fixture.create(int) != -1

    def test_relay_abstract_to_concrete(self, fixture):
        class Currency:
            pass

        class Euro(Currency):
            pass

        euro = Euro()
        fixture.inject(euro)
        fixture.relay(Currency, Euro)
        assert fixture.create(Currency) is euro

    def test_customize_with_callable(self, fixture):
        applied = fixture.customize(lambda editor: editor.member("currency", "EUR"))
        assert fixture.create(Money).currency == "EUR"
        assert applied.name == "<lambda>"

    def test_remove_customization(self, fixture):
        customization = MemberValueCustomization({"number": "INV-1"})
        fixture.customize(customization)
        assert fixture.create(Invoice).number == "INV-1"
        fixture.remove_customization(customization)
        assert fixture.create(Invoice).number.startswith("number")
        assert fixture.applied_customizations == []

    def test_remove_customization_by_applied_handle(self, fixture):
        applied = fixture.inject(7)
        fixture.remove_customization(applied)
        assert fixture.create(int) != 7

    def test_remove_unknown_customization(self, fixture):
        with pytest.raises(ValueError):
            fixture.remove_customization(MemberValueCustomization({}))

    def test_failed_customization_leaves_fixture_untouched(self, fixture):
        class Broken(Customization):
            def customize(self, editor):
                editor.inject(1, as_type=int)
                raise ConfigurationError("bad")

        with pytest.raises(ConfigurationError):
            fixture.customize(Broken())
        assert fixture.applied_customizations == []
        assert len(fixture.customizations) == 0

    def test_conflicting_edits_leave_engine_untouched(self, fixture):
        engine_before = list(fixture.engine)

        def remove_twice(editor):
            editor.remove(fixture.engine[0])
            editor.remove(fixture.engine[0])

        with pytest.raises(ConfigurationError):
            fixture.customize(remove_twice)
        assert list(fixture.engine) == engine_before

    def test_customize_rejects_non_callables(self, fixture):
        with pytest.raises(ConfigurationError):
            fixture.customize(42)


class TestBehaviors:
    def test_recursion_guard_registered_by_default(self, fixture):
        assert isinstance(fixture.behaviors[0], RecursionGuardBehavior)

    def test_trace(self, fixture):
        lines = []
        tracing = fixture.trace(lines.append)
        fixture.create(Money)
        assert isinstance(tracing, TracingBehavior)
        assert lines[0] == f"Requested: {TypeRequest(Money)}"
        assert lines[-1].startswith("Created: ")
        assert any(line.startswith("  Requested: ") for line in lines)

    def test_remove_behavior(self, fixture):
        lines = []
        tracing = fixture.trace(lines.append)
        fixture.remove_behavior(tracing)
        fixture.create(int)
        assert lines == []

    def test_add_behavior_rejects_non_behaviors(self, fixture):
        with pytest.raises(ConfigurationError):
            fixture.add_behavior(lambda builder: builder)

    def test_exception_translation_on_a_single_builder(self, fixture):
        def refuse(request, context):
            if isinstance(request, TypeRequest) and request.type is int:
                raise CannotConstructError(request, "refused")
            return NoSpecimen

        fixture.add_builder(ExceptionToNoSpecimenBehavior().transform(FunctionBuilder(refuse)))
        assert isinstance(fixture.create(int), int)

    def test_untranslated_fault_propagates(self, fixture):
        def refuse(request, context):
            if isinstance(request, TypeRequest) and request.type is int:
                raise CannotConstructError(request, "refused")
            return NoSpecimen

        fixture.add_builder(refuse)
        with pytest.raises(CannotConstructError):
            fixture.create(int)

    def test_omit_specimen_from_top_level_is_none(self, fixture):
        fixture.add_builder(only(Marker, OmitSpecimen))
        assert fixture.create(Marker) is None


class TestConcurrency:
    def test_mutation_during_resolution_is_rejected(self, fixture):
        errors = []

        def meddle(request, context):
            if isinstance(request, TypeRequest) and request.type is Marker:
                try:
                    fixture.add_builder(FixedBuilder(1))
                except GraphMutationError as e:
                    errors.append(e)
                return Marker()
            return NoSpecimen

        fixture.add_builder(meddle)
        assert isinstance(fixture.create(Marker), Marker)
        assert len(errors) == 1

    def test_behavior_change_during_resolution_is_rejected(self, fixture):
        def meddle(request, context):
            if isinstance(request, TypeRequest) and request.type is Marker:
                fixture.set_recursion_handler("omit")
            return NoSpecimen

        fixture.add_builder(meddle)
        with pytest.raises(GraphMutationError):
            fixture.create(Marker)

    def test_behavior_touching_the_fixture_while_wrapping(self, fixture):
        errors, results = [], []

        class Meddling(Behavior):
            def transform(self, builder):
                try:
                    fixture.add_builder(FixedBuilder(1))
                except GraphMutationError as e:
                    errors.append(e)
                return builder

        fixture.add_behavior(Meddling())
        worker = threading.Thread(target=lambda: results.append(fixture.create(int)))
        worker.start()
        worker.join(timeout=5)

        assert not worker.is_alive()
        assert len(errors) == 1
        assert isinstance(results[0], int)

    def test_mutation_allowed_between_resolutions(self, fixture):
        fixture.create(int)
        fixture.add_builder(only(Marker, "ok"))
        assert fixture.create(Marker) == "ok"

    def test_concurrent_calls_do_not_share_recursion_state(self, fixture):
        barrier = threading.Barrier(2, timeout=5)

        def rendezvous(request, context):
            if isinstance(request, TypeRequest) and request.type is Marker:
                barrier.wait()
                return Marker()
            return NoSpecimen

        fixture.add_builder(rendezvous)
        results, errors = [], []

        def worker():
            try:
                results.append(fixture.create(Marker))
            except Exception as e:  # noqa: BLE001
                errors.append(e)

        threads = [threading.Thread(target=worker) for _ in range(2)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=10)

        assert errors == []
        assert len(results) == 2

    def test_concurrent_structured_creation(self, fixture):
        results = []

        def worker():
            for _ in range(20):
                results.append(fixture.create(Invoice))

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(results) == 80
        assert all(isinstance(r.total, Money) for r in results)


def test_member_request_through_fixture(fixture):
    fixture.customize(MemberValueCustomization({"currency": "USD"}, owner=Money))
    assert fixture.resolve(MemberRequest(Money, "currency", str)) == "USD"
