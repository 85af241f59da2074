# examples/star_registry_demo.py
# Run with: python examples/star_registry_demo.py

from dataclasses import replace

from starregistry import StarRegistry, WalletKeyPair
from starregistry.verify.validator import ChainValidator


if __name__ == "__main__":
    registry = StarRegistry()
    alice = WalletKeyPair.generate()
    bob = WalletKeyPair.generate()

    print("\n[Registering stars]")
    for wallet, star in [
        (alice, {"ra": "16h 29m 1.0s", "dec": "-26° 29' 24.9", "story": "Found on a clear night"}),
        (bob, {"ra": "5h 55m 10.3s", "dec": "7° 24' 25", "story": "Betelgeuse, obviously"}),
        (alice, {"ra": "13h 03m 33.35s", "dec": "-49° 31' 38.1", "story": "Second one"}),
    ]:
        message = registry.request_message_ownership_verification(wallet.address)
        block = registry.submit_star(wallet.address, message, wallet.sign(message), star)
        print(f"  height {block.height} | {block.hash[:12]}... | {wallet.address[:10]}...")

    print("\n[Stars owned by alice]")
    for owned in registry.get_stars_by_wallet_address(alice.address):
        print(f"  {owned.star['story']}")

    print("\n[Forged signature]")
    message = registry.request_message_ownership_verification(alice.address)
    try:
        registry.submit_star(alice.address, message, bob.sign(message), {"story": "stolen"})
    except Exception as e:
        print(f"  Rejected: {type(e).__name__}")
    print(f"  Height still {registry.get_chain_height()}")

    print("\n[Verification]")
    print(f"  {registry.validate_chain()}")

    print("\n[Tamper detection]")
    tampered = list(registry.store.get_chain())
    tampered[1] = replace(tampered[1], payload=tampered[2].payload)
    print(f"  {ChainValidator().validate(tampered)}")

    print("\n" + "=" * 60)
