"""One-shot retention run (cron-friendly alternative to the in-process loop).

Deletes read in-app notifications and inactive device tokens older than the
configured number of days.
"""

import argparse

from agrinotify.common.config import settings
from agrinotify.common.logging import configure_logging
from agrinotify.services.notification.service import build_service


def main() -> None:
    parser = argparse.ArgumentParser(description="Delete expired notifications and device tokens.")
    parser.add_argument("--notification-days", type=int, default=settings.notification_retention_days)
    parser.add_argument("--device-token-days", type=int, default=settings.device_token_retention_days)
    args = parser.parse_args()

    configure_logging(f"{settings.service_name}-retention", settings.log_level)
    service = build_service(settings)
    deleted = service.run_retention(args.notification_days, args.device_token_days)
    print(f"Deleted notifications={deleted['farmer_notifications']} device_tokens={deleted['device_tokens']}")


if __name__ == "__main__":
    main()
