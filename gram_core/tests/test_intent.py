import pytest

from gram_core.routing.intent import IntentClassifier, wants_image_generation


@pytest.mark.parametrize(
    "prompt",
    [
        "একটি ছবি আঁকো",
        "ধানক্ষেতের একটি ছবি আঁকো",
        "নদীর ধারে সূর্যাস্ত আঁকো",
        "Please DRAW a cow",
        "show me a picture of rice",
        # negation is not handled
        "ছবি আঁকো না",
    ],
)
def test_trigger_words_classify_as_image(prompt):
    assert wants_image_generation(prompt) is True


@pytest.mark.parametrize(
    "prompt",
    ["আজকের আবহাওয়া কেমন?", "গ্রামের একটি সুন্দর গল্প বলো", "", None],
)
def test_prompts_without_triggers(prompt):
    assert wants_image_generation(prompt) is False


def test_case_sensitive_classifier():
    clf = IntentClassifier(triggers=["draw"], case_sensitive=True)
    assert clf("draw a boat")
    assert not clf("DRAW a boat")


def test_classifier_from_settings():
    class SettingsStub:
        image_trigger_words = ["গান"]
        intent_case_sensitive = False

    clf = IntentClassifier.from_settings(SettingsStub())
    assert clf.wants_image_generation("একটি গান শোনাও")
    assert not clf.wants_image_generation("একটি ছবি আঁকো")


def test_classifier_needs_triggers():
    with pytest.raises(ValueError):
        IntentClassifier(triggers=[])
