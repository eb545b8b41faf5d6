"""Tests for the report flow session store."""

import pytest

from petspot.domain.errors import (
    FieldNotEditableError,
    FlowTransitionError,
    UnknownFieldError,
)
from petspot.domain.report import FlowKind, FlowState, FlowStep
from petspot.services.flow import VALIDATION_TOAST, FlowSessionStore
from petspot.services.photo_cache import DiskPhotoAttachmentCache
from tests.conftest import fill_missing_flow, make_png


def test_store_starts_on_first_step(store: FlowSessionStore) -> None:
    assert store.current_step is FlowStep.MICROCHIP
    assert store.state == FlowState.start(FlowKind.MISSING)


def test_found_flow_starts_on_photo(photo_cache: DiskPhotoAttachmentCache) -> None:
    store = FlowSessionStore(photo_cache=photo_cache, kind=FlowKind.FOUND)

    assert store.current_step is FlowStep.PHOTO


def _reach_description(store: FlowSessionStore) -> None:
    store.advance(FlowStep.MICROCHIP)
    store.attach_photo(make_png(), "pet.png")
    store.advance(FlowStep.PHOTO)


def test_update_never_changes_step(store: FlowSessionStore) -> None:
    store.update(microchip_number="123")

    assert store.current_step is FlowStep.MICROCHIP
    assert store.state.microchip_number == "123"


def test_update_rejects_fields_of_other_steps(store: FlowSessionStore) -> None:
    with pytest.raises(FieldNotEditableError) as excinfo:
        store.update(microchip_number="123", email="a@b.co")

    assert excinfo.value.names == ["email"]
    assert store.state.microchip_number == ""


def test_passed_description_cannot_change_on_contact(
    store: FlowSessionStore,
) -> None:
    fill_missing_flow(store)

    with pytest.raises(FieldNotEditableError):
        store.update(animal_age="abc", latitude="999")
    with pytest.raises(FieldNotEditableError):
        store.update(animal_species="cat")

    assert store.state.animal_age == "5"
    assert store.state.animal_species == "dog"
    assert store.state.animal_breed == "Beagle"


def test_found_flow_edits_microchip_on_description(
    photo_cache: DiskPhotoAttachmentCache,
) -> None:
    store = FlowSessionStore(photo_cache=photo_cache, kind=FlowKind.FOUND)
    store.attach_photo(make_png(), "pet.png")
    store.advance(FlowStep.PHOTO)

    store.update(microchip_number="12345", animal_species="CAT")

    assert store.state.microchip_number == "12345"


def test_update_rejects_unknown_fields_without_partial_apply(
    store: FlowSessionStore,
) -> None:
    with pytest.raises(UnknownFieldError):
        store.update(microchip_number="123", current_step=FlowStep.CONTACT)

    assert store.state.microchip_number == ""
    assert store.current_step is FlowStep.MICROCHIP


def test_contact_step_advances_to_completed(store: FlowSessionStore) -> None:
    fill_missing_flow(store)
    assert store.current_step is FlowStep.CONTACT

    transition = store.advance(FlowStep.CONTACT)
    assert transition.advanced
    assert transition.step is FlowStep.COMPLETED


def test_advance_from_each_step_moves_exactly_one(store: FlowSessionStore) -> None:
    steps: list[FlowStep] = []
    store.subscribe(lambda state: steps.append(state.current_step))

    fill_missing_flow(store)
    store.advance(FlowStep.CONTACT)

    distinct = [
        step for previous, step in zip([None, *steps], steps) if step != previous
    ]
    assert distinct == [
        FlowStep.MICROCHIP,
        FlowStep.PHOTO,
        FlowStep.DESCRIPTION,
        FlowStep.CONTACT,
        FlowStep.COMPLETED,
    ]


def test_invalid_advance_keeps_step_and_reports_errors(
    store: FlowSessionStore,
) -> None:
    toasts: list[str] = []
    store.subscribe_toasts(toasts.append)
    store.advance(FlowStep.MICROCHIP)

    transition = store.advance(FlowStep.PHOTO)

    assert not transition.advanced
    assert store.current_step is FlowStep.PHOTO
    assert set(transition.validation.errors) == {"photo_attachment_id"}
    assert set(store.state.errors) == {"photo_attachment_id"}
    assert toasts == [VALIDATION_TOAST]


def test_advance_from_wrong_step_raises(store: FlowSessionStore) -> None:
    with pytest.raises(FlowTransitionError):
        store.advance(FlowStep.DESCRIPTION)


def test_advance_on_completed_flow_is_noop(store: FlowSessionStore) -> None:
    fill_missing_flow(store)
    store.advance(FlowStep.CONTACT)

    transition = store.advance(FlowStep.CONTACT)

    assert not transition.advanced
    assert store.current_step is FlowStep.COMPLETED


def test_retreat_preserves_later_data(store: FlowSessionStore) -> None:
    fill_missing_flow(store)

    assert store.retreat() is FlowStep.DESCRIPTION
    assert store.retreat() is FlowStep.PHOTO

    assert store.state.contact_details.email == "owner@example.com"
    assert store.state.animal_breed == "Beagle"
    assert store.state.photo_attachment_id is not None


def test_retreat_from_first_step_returns_none(store: FlowSessionStore) -> None:
    assert store.retreat() is None
    assert store.current_step is FlowStep.MICROCHIP


def test_retreat_from_completed_raises(store: FlowSessionStore) -> None:
    fill_missing_flow(store)
    store.advance(FlowStep.CONTACT)

    with pytest.raises(FlowTransitionError):
        store.retreat()


def test_species_change_clears_breed_and_breed_error(
    store: FlowSessionStore,
) -> None:
    _reach_description(store)
    store.update(animal_species="DOG")
    store.advance(FlowStep.DESCRIPTION)
    assert "animal_breed" in store.state.errors

    store.update(animal_breed="Beagle")
    store.update(animal_species="CAT")

    assert store.state.animal_breed == ""
    assert "animal_breed" not in store.state.errors


def test_same_species_keeps_breed(store: FlowSessionStore) -> None:
    _reach_description(store)
    store.update(animal_species="DOG", animal_breed="Beagle")
    store.update(animal_species="DOG")

    assert store.state.animal_breed == "Beagle"


def test_empty_reward_is_stored_as_none(store: FlowSessionStore) -> None:
    fill_missing_flow(store)
    store.update(reward_description="")
    assert store.state.contact_details.reward_description is None

    store.update(reward_description="  100 PLN ")
    assert store.state.contact_details.reward_description == "  100 PLN "


def test_attach_photo_replaces_previous_entry(
    store: FlowSessionStore, photo_cache: DiskPhotoAttachmentCache
) -> None:
    first = store.attach_photo(make_png(), "first.png")
    second = store.attach_photo(make_png(8, 8), "second.png")

    assert photo_cache.get(first.id) is None
    assert store.photo() == second


def test_remove_photo(store: FlowSessionStore) -> None:
    metadata = store.attach_photo(make_png(), "pet.png")

    store.remove_photo()

    assert store.state.photo_attachment_id is None
    assert not metadata.cached_path.exists()


def test_clear_twice_yields_default_state(
    store: FlowSessionStore, photo_cache: DiskPhotoAttachmentCache
) -> None:
    fill_missing_flow(store)
    photo_id = store.state.photo_attachment_id
    assert photo_id is not None

    store.clear()
    first = store.state
    store.clear()

    assert first == store.state == FlowState.start(FlowKind.MISSING)
    assert photo_cache.get(photo_id) is None


def test_subscribers_receive_snapshots_until_unsubscribed(
    store: FlowSessionStore,
) -> None:
    snapshots: list[FlowState] = []
    unsubscribe = store.subscribe(snapshots.append)

    store.update(microchip_number="1")
    unsubscribe()
    store.update(microchip_number="2")

    assert [snapshot.microchip_number for snapshot in snapshots] == ["1"]
