import pytest
from pydantic import ValidationError

from valnode.core.statemachine import StateDirection
from valnode.errors import ConfigurationError
from valnode.genesis.builder import GenesisBuilder, GenesisOptions, add_prefunded_address
from valnode.genesis.models import (
    DEFAULT_AIRDROP_AMOUNT,
    EWOQ_ADDRESS,
    LOW_THROUGHPUT_FEES,
    MEDIUM_THROUGHPUT_FEES,
    ONE_TOKEN,
    GenesisParams,
    TeleporterInfo,
)
from valnode.genesis.serializer import build_genesis
from valnode.prompts.options import (
    AddPrecompileChoice,
    AirdropChoice,
    FeeChoice,
    GasTokenChoice,
    ListDecision,
)

from conftest import ScriptedPrompter

OTHER_ADDRESS = "0x1111111111111111111111111111111111111111"


def test_defaults_build_without_any_prompt():
    prompter = ScriptedPrompter([])
    builder = GenesisBuilder(
        prompter,
        GenesisOptions(subnet_name="demo", chain_id=777, token_symbol="DMO", use_defaults=True),
        teleporter_info=lambda: TeleporterInfo(version="v1.0.0", funded_address=OTHER_ADDRESS),
    )

    params = builder.build()

    assert prompter.questions == []
    assert params.chain_id == 777
    assert params.token_symbol == "DMO"
    assert params.fee_config == LOW_THROUGHPUT_FEES
    assert params.allocation[EWOQ_ADDRESS] == DEFAULT_AIRDROP_AMOUNT * ONE_TOKEN
    assert params.use_teleporter is True
    assert params.allocation[OTHER_ADDRESS] == params.teleporter_info.funded_balance
    assert params.precompiles.warp is True
    assert params.precompiles.enabled_optional() == []


def test_going_back_from_fees_reasks_descriptors_only():
    prompter = ScriptedPrompter(
        [
            1234, "TST", GasTokenChoice.NATIVE, False,          # descriptors
            FeeChoice.GO_BACK,                                  # fee -> back
            5555, "ABC", GasTokenChoice.NATIVE, False,          # descriptors again
            FeeChoice.EXPLAIN, FeeChoice.MEDIUM,                # fee
            AirdropChoice.EWOQ,                                 # airdrop
            AddPrecompileChoice.NO,                             # precompiles
        ]
    )
    params = GenesisBuilder(prompter, GenesisOptions(subnet_name="demo")).build()

    assert prompter.answers == []
    assert params.chain_id == 5555
    assert params.token_symbol == "ABC"
    assert params.fee_config == MEDIUM_THROUGHPUT_FEES
    assert params.use_teleporter is False
    assert list(params.allocation) == [EWOQ_ADDRESS]
    assert params.precompiles.warp is True


def test_going_back_from_precompiles_reasks_airdrop():
    prompter = ScriptedPrompter(
        [
            FeeChoice.LOW,
            AirdropChoice.EWOQ,
            AddPrecompileChoice.GO_BACK,
            AirdropChoice.CUSTOM,
            ListDecision.ADD, OTHER_ADDRESS, 50,
            ListDecision.DONE,
            AddPrecompileChoice.NO,
        ]
    )
    opts = GenesisOptions(
        subnet_name="demo", chain_id=10, token_symbol="T", use_external_gas_token=False, use_teleporter=False
    )
    params = GenesisBuilder(prompter, opts).build()

    assert params.allocation == {OTHER_ADDRESS: 50 * ONE_TOKEN}


def test_external_gas_token_forces_teleporter():
    prompter = ScriptedPrompter([GasTokenChoice.EXPLAIN, GasTokenChoice.EXTERNAL])
    opts = GenesisOptions(subnet_name="demo", chain_id=1, token_symbol="X")
    builder = GenesisBuilder(prompter, opts)

    builder.descriptors_stage()

    assert builder.use_external_gas_token is True
    assert builder.use_teleporter is True


def test_new_key_airdrop_uses_key_factory():
    created = []

    def new_key(name):
        created.append(name)
        return OTHER_ADDRESS

    prompter = ScriptedPrompter([AirdropChoice.NEW_KEY])
    builder = GenesisBuilder(prompter, GenesisOptions(subnet_name="demo"), new_key=new_key)
    builder.token_symbol = "T"
    builder.airdrop_stage()

    assert created == ["subnet_demo_airdrop"]
    assert builder.allocation == {OTHER_ADDRESS: DEFAULT_AIRDROP_AMOUNT * ONE_TOKEN}


def test_add_prefunded_address_merges_case_insensitively():
    mixed = "0xAbCdEf0000000000000000000000000000000001"
    allocation = {mixed: 5}
    add_prefunded_address(allocation, mixed.lower(), 7)
    assert allocation == {mixed: 12}


def test_build_genesis_renders_chain_config_and_alloc():
    prompter = ScriptedPrompter([])
    params = GenesisBuilder(
        prompter, GenesisOptions(subnet_name="demo", chain_id=99, token_symbol="D", use_defaults=True, use_teleporter=False)
    ).build()

    doc = build_genesis(params, timestamp=1700000000)

    assert doc["config"]["chainId"] == 99
    assert doc["config"]["warpConfig"]["blockTimestamp"] == 1700000000
    assert doc["gasLimit"] == hex(LOW_THROUGHPUT_FEES.gas_limit)
    assert doc["alloc"][EWOQ_ADDRESS.lower()[2:]]["balance"] == hex(DEFAULT_AIRDROP_AMOUNT * ONE_TOKEN)


@pytest.mark.parametrize("chain_id", [-5, 0, 2**64])
def test_out_of_range_chain_id_is_rejected(chain_id):
    prompter = ScriptedPrompter([])
    builder = GenesisBuilder(
        prompter,
        GenesisOptions(
            subnet_name="demo", chain_id=chain_id, token_symbol="DMO", use_defaults=True, use_teleporter=False
        ),
    )

    with pytest.raises(ConfigurationError, match="invalid chain id"):
        builder.build()
    assert prompter.questions == []


def test_genesis_params_bound_chain_id():
    with pytest.raises(ValidationError):
        GenesisParams(chain_id=-5, token_symbol="T", fee_config=LOW_THROUGHPUT_FEES)
    assert GenesisParams(chain_id=2**64 - 1, token_symbol="T", fee_config=LOW_THROUGHPUT_FEES).chain_id == 2**64 - 1


def test_precompiles_explain_reasks_the_question():
    prompter = ScriptedPrompter([AddPrecompileChoice.EXPLAIN, AddPrecompileChoice.NO])
    opts = GenesisOptions(
        subnet_name="demo", chain_id=10, token_symbol="T", use_external_gas_token=False, use_teleporter=False
    )
    builder = GenesisBuilder(prompter, opts)
    builder.allocation = {EWOQ_ADDRESS: ONE_TOKEN}

    assert builder.precompiles_stage() is StateDirection.FORWARD
    assert prompter.answers == []
    assert len(prompter.questions) == 2
    assert builder.precompiles.enabled_optional() == []
