import os
from sshlink.core.config import get_settings
from sshlink.models.connection_profile import ConnectionProfile
from sshlink.services.errors import LinkEncodingError
from sshlink.services.link_encoder import profile_to_link
from sshlink.services.qr_generator import render_qr_file


def generate_links(
    accounts: list,
    qr_output_folder: str = "qr_codes"
) -> list:
    """Print a link for each (username, password, expiry_date) and save its QR PNG."""
    settings = get_settings()
    os.makedirs(qr_output_folder, exist_ok=True)

    links = []
    for username, password, expiry_date in accounts:
        for port in settings.ports:
            try:
                profile = ConnectionProfile(
                    server_address=settings.server_address,
                    port=port,
                    username=username,
                    password=password,
                    location=settings.location,
                    expiry_date=expiry_date,
                )
                uri = profile_to_link(profile)
                qr_filepath = os.path.join(qr_output_folder, f"{username}_{port}.png")
                image = render_qr_file(uri, qr_filepath)
            except LinkEncodingError as e:
                print(f"✗ Skipped '{username}' on port {port}: {e.message}")
                continue

            links.append(uri)
            print(f"✓ Generated link for '{username}' on port {port}")
            print(f"  → {uri}")
            print(f"  → Saved {image.width}x{image.height} PNG to: {qr_filepath}")

    print(f"\n✓ Successfully generated {len(links)} link(s)!")
    return links


if __name__ == '__main__':
    account_list = [
        ("user001", "SSHMGMT00001", "2024-01-01"),
        ("user002", "SSHMGMT00002", "2024-02-01"),
    ]

    generate_links(account_list, qr_output_folder="qr_codes")
