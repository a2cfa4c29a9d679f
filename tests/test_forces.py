"""
Test suite for force composition.

Tests cover:
- ContributorKey construction, parsing and configuration-driven extension
- ForceContribution validation, arithmetic and special methods
- ForceLedger get/set/combine semantics
- Order independence of combine
"""

import itertools
import pytest
import numpy as np

from apsis import (
    ContributorKind, ContributorKey, ForceContribution, ForceLedger,
    THRUSTERS, PRIMARY_GRAVITY, temp_config,
)


# =============================================================================
# ContributorKey
# =============================================================================

class TestContributorKey:
    """Keys identify logical contributors by value."""

    def test_common_keys(self):
        assert THRUSTERS.kind == ContributorKind.THRUSTERS
        assert PRIMARY_GRAVITY == ContributorKey.gravity('primary')
        assert str(THRUSTERS) == 'thrusters'
        assert str(PRIMARY_GRAVITY) == 'gravity:primary'

    def test_value_equality(self):
        """Independently constructed keys share a slot."""
        assert ContributorKey.gravity('Moon') == ContributorKey.gravity('Moon')
        assert hash(ContributorKey.gravity('Moon')) == hash(ContributorKey.gravity('Moon'))
        assert ContributorKey.gravity('Moon') != ContributorKey.gravity('Earth')

    def test_immutable(self):
        with pytest.raises(AttributeError):
            THRUSTERS.tag = 'main'

    @pytest.mark.parametrize("text, expected", [
        ('thrusters', THRUSTERS),
        ('Thrusters', THRUSTERS),
        ('primary-gravity', PRIMARY_GRAVITY),
        ('gravity', PRIMARY_GRAVITY),
        ('gravity:moon', ContributorKey.gravity('moon')),
        ('external:drag', ContributorKey.external('drag')),
        ('drag', ContributorKey.external('drag')),
    ])
    def test_parse_strings(self, text, expected):
        assert ContributorKey.parse(text) == expected

    def test_parse_kind(self):
        assert ContributorKey.parse(ContributorKind.THRUSTERS) == THRUSTERS
        assert ContributorKey.parse(ContributorKind.GRAVITY) == PRIMARY_GRAVITY
        with pytest.raises(ValueError):
            ContributorKey.parse(ContributorKind.EXTERNAL)

    def test_parse_unknown(self):
        with pytest.raises(ValueError, match="Unknown contributor key"):
            ContributorKey.parse('warp-drive')

    def test_parse_wrong_type(self):
        with pytest.raises(TypeError):
            ContributorKey.parse(42)

    def test_gravity_requires_tag(self):
        with pytest.raises(ValueError):
            ContributorKey(ContributorKind.GRAVITY)

    def test_bad_kind(self):
        with pytest.raises(TypeError):
            ContributorKey('thrusters')

    def test_unconfigured_external_rejected(self):
        with pytest.raises(ValueError, match="Unknown external contributor"):
            ContributorKey.external('solar-sail')

    def test_external_extended_by_config(self):
        """Adding a tag to the configuration enables the key."""
        with temp_config(EXTERNAL_CONTRIBUTORS=('drag', 'solar-sail')):
            key = ContributorKey.parse('solar-sail')
            assert key == ContributorKey(ContributorKind.EXTERNAL, 'solar-sail')
        assert str(key) == 'external:solar-sail'

    def test_unconfigured_external_warns_when_relaxed(self):
        with temp_config(STRICT_VALIDATION=False):
            with pytest.warns(UserWarning):
                key = ContributorKey.external('tether')
        assert key.tag == 'tether'


# =============================================================================
# ForceContribution
# =============================================================================

class TestForceContribution:
    """Immutable force/torque pairs."""

    def test_defaults_to_zero(self):
        c = ForceContribution()
        assert np.array_equal(c.force, np.zeros(3))
        assert np.array_equal(c.torque, np.zeros(3))
        assert c.is_zero()
        assert ForceContribution.zero() == c

    def test_read_only_arrays(self):
        c = ForceContribution(force=[1, 2, 3])
        with pytest.raises(ValueError):
            c.force[0] = 10.0

    def test_input_not_aliased(self):
        src = np.array([1.0, 2.0, 3.0])
        c = ForceContribution(force=src)
        src[0] = 99.0
        assert c.force[0] == 1.0

    def test_wrong_shape(self):
        with pytest.raises(ValueError):
            ForceContribution(force=[1.0, 2.0])

    @pytest.mark.parametrize("bad", [np.nan, np.inf, -np.inf])
    def test_non_finite_rejected(self, bad):
        with pytest.raises(ValueError):
            ForceContribution(force=[bad, 0.0, 0.0])
        with pytest.raises(ValueError):
            ForceContribution(torque=[0.0, bad, 0.0])

    def test_non_finite_zeroed_when_relaxed(self):
        with temp_config(STRICT_VALIDATION=False):
            with pytest.warns(UserWarning):
                c = ForceContribution(force=[np.nan, 2.0, 3.0])
        assert np.array_equal(c.force, [0.0, 2.0, 3.0])

    def test_arithmetic(self):
        a = ForceContribution([1, 2, 3], [0, 0, 1])
        b = ForceContribution([-1, 0, 1], [1, 0, 0])
        assert np.array_equal((a + b).force, [0, 2, 4])
        assert np.array_equal((a + b).torque, [1, 0, 1])
        assert np.array_equal((a - b).force, [2, 2, 2])
        assert np.array_equal((-a).force, [-1, -2, -3])
        assert np.array_equal((a * 2).force, [2, 4, 6])
        assert np.array_equal((0.5 * a).torque, [0, 0, 0.5])

    def test_add_rejects_other_types(self):
        with pytest.raises(TypeError):
            ForceContribution() + 1.0

    def test_equality_tolerance(self):
        a = ForceContribution([1.0, 0.0, 0.0])
        b = ForceContribution([1.0 + 1e-15, 0.0, 0.0])
        assert a == b
        assert hash(a) == hash(b)
        assert a != ForceContribution([1.1, 0.0, 0.0])

    def test_repr(self):
        assert "ForceContribution(force=[1.0, 0.0, 0.0]" in repr(
            ForceContribution([1.0, 0.0, 0.0]))


# =============================================================================
# ForceLedger
# =============================================================================

class TestForceLedger:
    """Per-body contributor bookkeeping."""

    def test_set_then_get_returns_same_value(self):
        ledger = ForceLedger()
        c = ForceContribution([1.5, -2.0, 0.25], [0.0, 3.0, 0.0])
        ledger.set(THRUSTERS, c)

        got = ledger.get(THRUSTERS)
        assert got is c
        assert np.array_equal(got.force, c.force)
        assert np.array_equal(got.torque, c.torque)

    def test_get_unset_key_is_zero(self):
        ledger = ForceLedger()
        got = ledger.get(PRIMARY_GRAVITY)
        assert np.array_equal(got.force, [0.0, 0.0, 0.0])
        assert np.array_equal(got.torque, [0.0, 0.0, 0.0])
        # lookups do not create entries
        assert len(ledger) == 0

    @pytest.mark.parametrize("key", [
        ContributorKind.EXTERNAL, "no-such-contributor", "external:", 42,
    ])
    def test_get_unresolvable_key_is_zero(self, key):
        ledger = ForceLedger()
        ledger.set(THRUSTERS, ForceContribution([1.0, 0.0, 0.0]))
        assert ledger.get(key) is ForceContribution.zero()

    def test_get_after_external_tag_unconfigured(self):
        """A stored entry stays readable once its tag leaves the config."""
        ledger = ForceLedger()
        drag = ForceContribution([-0.5, 0.0, 0.0])
        ledger.set("drag", drag)

        with temp_config(EXTERNAL_CONTRIBUTORS=()):
            assert ledger.get("drag") is drag
            assert ledger.get("external:drag") is drag
            assert ledger.get("docking").is_zero()

    def test_empty_combine_is_zero(self):
        combined = ForceLedger().combine()
        assert np.array_equal(combined.force, [0.0, 0.0, 0.0])
        assert np.array_equal(combined.torque, [0.0, 0.0, 0.0])

    def test_last_write_wins(self):
        ledger = ForceLedger()
        ledger.set(THRUSTERS, ForceContribution([1, 0, 0]))
        ledger.set('thrusters', ForceContribution([0, 5, 0]))
        assert len(ledger) == 1
        assert np.array_equal(ledger.combine().force, [0, 5, 0])

    def test_string_and_key_share_slot(self):
        ledger = ForceLedger()
        ledger.set('gravity:moon', ForceContribution([0, 0, -1]))
        assert ledger.get(ContributorKey.gravity('moon')).force[2] == -1
        assert 'gravity:moon' in ledger
        assert ContributorKey.gravity('moon') in ledger
        assert 'gravity:sun' not in ledger
        assert 'warp-drive' not in ledger

    def test_combine_sums_forces_and_torques(self):
        ledger = ForceLedger()
        ledger.set(THRUSTERS, ForceContribution([10, 0, 0], [0, 0, 1]))
        ledger.set(PRIMARY_GRAVITY, ForceContribution([0, -9.8, 0]))
        ledger.set('drag', ForceContribution([-1, 0, 0], [0, 0, -0.5]))

        combined = ledger.combine()
        assert np.allclose(combined.force, [9.0, -9.8, 0.0])
        assert np.allclose(combined.torque, [0.0, 0.0, 0.5])

    def test_release_keeps_entry_at_zero(self):
        ledger = ForceLedger()
        ledger.set(THRUSTERS, ForceContribution([1, 1, 1]))
        ledger.release(THRUSTERS)
        assert THRUSTERS in ledger
        assert ledger.get(THRUSTERS).is_zero()
        assert ledger.combine().is_zero()

    def test_set_requires_contribution(self):
        ledger = ForceLedger()
        with pytest.raises(TypeError):
            ledger.set(THRUSTERS, [1.0, 0.0, 0.0])

    def test_iteration_and_items(self):
        ledger = ForceLedger()
        ledger.set(THRUSTERS, ForceContribution([1, 0, 0]))
        ledger.set(PRIMARY_GRAVITY, ForceContribution([0, 1, 0]))
        assert set(ledger) == {THRUSTERS, PRIMARY_GRAVITY}
        assert set(ledger.keys()) == {THRUSTERS, PRIMARY_GRAVITY}
        assert dict(ledger.items())[THRUSTERS] == ForceContribution([1, 0, 0])
        assert "thrusters" in repr(ledger)

    def test_many_gravity_sources(self):
        """N gravity sources each get their own slot."""
        ledger = ForceLedger()
        for i in range(10):
            ledger.set(ContributorKey.gravity(f"body-{i}"), ForceContribution([1, 0, 0]))
        assert len(ledger) == 10
        assert np.allclose(ledger.combine().force, [10, 0, 0])


# =============================================================================
# Order Independence
# =============================================================================

class TestCombineOrderIndependence:
    """combine() does not depend on the order contributors wrote in."""

    @staticmethod
    def _entries(rng, n):
        keys = [THRUSTERS, PRIMARY_GRAVITY, ContributorKey.external('drag'),
                ContributorKey.external('docking')]
        keys += [ContributorKey.gravity(f"src-{i}") for i in range(n - len(keys))]
        return [(k, ForceContribution(rng.normal(scale=1e3, size=3),
                                      rng.normal(scale=1e2, size=3)))
                for k in keys]

    def test_all_permutations_identical(self):
        rng = np.random.default_rng(11)
        entries = self._entries(rng, 5)
        results = []
        for perm in itertools.permutations(entries):
            ledger = ForceLedger()
            for key, c in perm:
                ledger.set(key, c)
            results.append(ledger.combine())

        first = results[0]
        for res in results[1:]:
            assert np.array_equal(res.force, first.force)
            assert np.array_equal(res.torque, first.torque)

    def test_random_orders_match_direct_sum(self):
        rng = np.random.default_rng(3)
        entries = self._entries(rng, 25)
        expected_force = np.sum([c.force for _, c in entries], axis=0)
        expected_torque = np.sum([c.torque for _, c in entries], axis=0)

        for _ in range(20):
            order = rng.permutation(len(entries))
            ledger = ForceLedger()
            for idx in order:
                ledger.set(*entries[idx])
            combined = ledger.combine()
            assert np.allclose(combined.force, expected_force, rtol=1e-12, atol=1e-9)
            assert np.allclose(combined.torque, expected_torque, rtol=1e-12, atol=1e-9)
