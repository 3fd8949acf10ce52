#!/usr/bin/env python3
"""
Create Test Customer
Provisions a law firm tenant against the configured database and prints its
dashboard credentials. The welcome email goes to the log instead of SendGrid.
"""

import argparse

from assetshield.factory import create_app
from assetshield.services.notifications import LogNotifier
from assetshield.services.provisioning import ProvisioningRequest, get_provisioning_pipeline


def create_test_customer(args):
    app = create_app({"NOTIFIER": LogNotifier()})

    with app.app_context():
        result = get_provisioning_pipeline().provision(ProvisioningRequest(
            firm_name=args.firm_name,
            lawyer_name=args.lawyer_name,
            lawyer_email=args.email,
            tier=args.tier,
            lawyer_phone=args.phone,
        ))
        customer = result.customer

        print(f"Customer #{customer.id}: {customer.firm_name} ({customer.tier})")
        print(f"  Dashboard login: {customer.owner_email}")
        print(f"  Password:        {result.password}")
        print(f"  API key:         {customer.api_key}")
        print(f"  Trial ends:      {customer.trial_ends_at:%Y-%m-%d}")
        print(f"  Provisioning run #{result.run.id}: {result.run.status}")


def main():
    parser = argparse.ArgumentParser(description="Provision a test law firm tenant")
    parser.add_argument("--firm-name", default="Smith & Associates Law")
    parser.add_argument("--lawyer-name", default="John Smith")
    parser.add_argument("--email", default="john@smithlaw.com")
    parser.add_argument("--phone", default="555-0100")
    parser.add_argument("--tier", default="professional", choices=["starter", "professional", "enterprise"])
    create_test_customer(parser.parse_args())


if __name__ == "__main__":
    main()
