import base64
import json

from valnode.models.network import Network
from valnode.models.sidecar import NetworkData, Sidecar, VMType
from valnode.subnet.export import export_path, export_subnet


def test_export_keeps_only_target_network(store, tmp_path):
    store.save_sidecar(Sidecar(
        name="demo",
        vm=VMType.SUBNET_EVM,
        networks={
            "Fuji": NetworkData(subnet_id="s-fuji", blockchain_id="b-fuji"),
            "Mainnet": NetworkData(subnet_id="s-main"),
        },
    ))
    store.write_genesis("demo", b'{"config":{}}')

    path = export_subnet(store, "demo", export_path("demo", str(tmp_path)), Network.fuji())

    assert path.name == "demo_export.dat"
    doc = json.loads(path.read_text())
    assert list(doc["sidecar"]["networks"]) == ["Fuji"]
    assert base64.b64decode(doc["genesis"]) == b'{"config":{}}'
    assert list(store.load_sidecar("demo").networks) == ["Fuji", "Mainnet"]
