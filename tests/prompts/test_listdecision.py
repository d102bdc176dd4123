from conftest import ScriptedPrompter

from valnode.prompts.listdecision import capture_list_decision
from valnode.prompts.options import ListDecision


def _capture(prompter):
    return capture_list_decision(
        prompter,
        "Configure the addresses",
        prompter.capture_address,
        "Enter an address",
        "address",
        "",
    )


def test_add_delete_done():
    prompter = ScriptedPrompter([
        ListDecision.ADD, "0xa",
        ListDecision.ADD, "0xb",
        ListDecision.ADD, "0xa",
        ListDecision.DELETE, 0,
        ListDecision.PREVIEW,
        ListDecision.DONE,
    ])

    assert _capture(prompter) == (["0xb"], False)
    assert not prompter.answers


def test_cancel_discards_items():
    prompter = ScriptedPrompter([ListDecision.ADD, "0xa", ListDecision.CANCEL])
    assert _capture(prompter) == ([], True)


def test_delete_on_empty_list_asks_again():
    prompter = ScriptedPrompter([ListDecision.DELETE, ListDecision.DONE])
    assert _capture(prompter) == ([], False)
    assert prompter.questions == ["Configure the addresses", "Configure the addresses"]
