# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/valnode/prompts/options.py
#
# Every interactive question returns one of these members. The value of a
# member is only ever used to render the menu.

from __future__ import annotations

from enum import Enum


class PromptOption(Enum):
    @property
    def label(self) -> str:
        return str(self.value)


class YesNo(PromptOption):
    YES = "Yes"
    NO = "No"


class AddPrecompileChoice(PromptOption):
    NO = "No"
    YES = "Yes"
    EXPLAIN = "Explain the options"
    GO_BACK = "Go back to previous step"


class VMChoice(PromptOption):
    SUBNET_EVM = "Subnet-EVM"
    CUSTOM = "Custom VM"
    EXPLAIN = "Explain the difference"


class VersionChoice(PromptOption):
    LATEST = "Use latest release version"
    PRE_RELEASE = "Use latest pre-release version"
    SPECIFIC = "Specify custom version"


class NodeVersionChoice(PromptOption):
    LATEST = "Use latest node release"
    FROM_SUBNET = "Use the version compatible with a subnet the node will validate"
    CUSTOM = "Specify a release version"


class GasTokenChoice(PromptOption):
    NATIVE = "The blockchain's native token"
    EXTERNAL = "A token from another blockchain"
    EXPLAIN = "Explain the difference"


class FeeChoice(PromptOption):
    LOW = "Low disk use    / Low Throughput    1.5 mil gas/s (C-Chain's setting)"
    MEDIUM = "Medium disk use / Medium Throughput 2 mil   gas/s"
    HIGH = "High disk use   / High Throughput   5 mil   gas/s"
    CUSTOMIZE = "Customize fee config"
    EXPLAIN = "Explain the options"
    GO_BACK = "Go back to previous step"


class AirdropChoice(PromptOption):
    EWOQ = "Airdrop 1 million tokens to the default ewoq address (do not use in production)"
    NEW_KEY = "Generate a new key and airdrop 1 million tokens to it"
    CUSTOM = "Customize your airdrop"
    EXPLAIN = "Explain the options"
    GO_BACK = "Go back to previous step"


class PrecompileChoice(PromptOption):
    NATIVE_MINT = "Native Minting"
    CONTRACT_ALLOW_LIST = "Contract Deployment Allow List"
    TX_ALLOW_LIST = "Transaction Allow List"
    FEE_MANAGER = "Adjust Fee Settings Post Deploy"
    REWARD_MANAGER = "Customize Fees Distribution"
    DONE = "Done"


class ListDecision(PromptOption):
    ADD = "Add"
    DELETE = "Delete"
    PREVIEW = "Preview"
    MORE_INFO = "More info"
    DONE = "Done"
    CANCEL = "Cancel"


class VMSourceChoice(PromptOption):
    LOCAL_BINARY = "I already have a VM binary"
    GIT_SOURCE = "Download and build from a git repository"


class NetworkChoice(PromptOption):
    FUJI = "Fuji"
    DEVNET = "Devnet"


class CloudChoice(PromptOption):
    AWS = "Amazon Web Services"
    GCP = "Google Cloud Platform"
