"""create_monetization_tables

Sites, the bot request log, AI company subscriptions, revenue events and
settled payments.

Revision ID: a1b2c3d4e5f6
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""

from collections.abc import Sequence

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "a1b2c3d4e5f6"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.execute(
        """
        CREATE TABLE IF NOT EXISTS sites (
            id UUID PRIMARY KEY,
            site_url VARCHAR(500) NOT NULL UNIQUE,
            site_name VARCHAR(255),
            admin_email VARCHAR(255),
            api_key VARCHAR(67) NOT NULL,
            active BOOLEAN NOT NULL DEFAULT TRUE,

            -- Monetization
            monetization_enabled BOOLEAN NOT NULL DEFAULT FALSE,
            pricing_per_request NUMERIC(12, 6) NOT NULL DEFAULT 0.001,
            allowed_bots JSONB NOT NULL DEFAULT '[]'::jsonb,
            subscription_tier VARCHAR(20) NOT NULL DEFAULT 'free',
            stripe_account_id VARCHAR(255),

            -- Timestamps
            created_at TIMESTAMP WITH TIME ZONE DEFAULT NOW() NOT NULL,
            updated_at TIMESTAMP WITH TIME ZONE DEFAULT NOW() NOT NULL
        )
        """
    )
    op.execute("CREATE UNIQUE INDEX IF NOT EXISTS ix_sites_api_key ON sites(api_key)")

    op.execute(
        """
        CREATE TABLE IF NOT EXISTS bot_requests (
            id UUID PRIMARY KEY,
            site_id UUID NOT NULL REFERENCES sites(id) ON DELETE CASCADE,

            -- Request
            ip_address VARCHAR(64),
            user_agent TEXT NOT NULL DEFAULT '',
            page_url TEXT,
            content_length INTEGER,

            -- Classification
            is_ai_bot BOOLEAN NOT NULL DEFAULT FALSE,
            bot_type VARCHAR(100),
            bot_company VARCHAR(100),
            confidence INTEGER NOT NULL DEFAULT 0,

            -- Decision
            action_taken VARCHAR(20) NOT NULL,
            reason VARCHAR(50),
            revenue_amount NUMERIC(12, 6) NOT NULL DEFAULT 0,
            lost_revenue NUMERIC(12, 6) NOT NULL DEFAULT 0,
            payment_id VARCHAR(255),
            processing_time_ms INTEGER,

            created_at TIMESTAMP WITH TIME ZONE DEFAULT NOW() NOT NULL
        )
        """
    )
    # Trailing-hour rate window and analytics scan by site and time
    op.execute(
        "CREATE INDEX IF NOT EXISTS ix_bot_requests_site_created "
        "ON bot_requests(site_id, created_at)"
    )
    op.execute(
        "CREATE INDEX IF NOT EXISTS ix_bot_requests_bot_company ON bot_requests(bot_company)"
    )
    op.execute(
        "CREATE INDEX IF NOT EXISTS ix_bot_requests_payment_id ON bot_requests(payment_id)"
    )

    op.execute(
        """
        CREATE TABLE IF NOT EXISTS ai_company_subscriptions (
            id UUID PRIMARY KEY,
            company VARCHAR(100) NOT NULL,
            status VARCHAR(50) NOT NULL DEFAULT 'active',
            stripe_subscription_id VARCHAR(255) UNIQUE,
            current_period_end TIMESTAMP WITH TIME ZONE,
            created_at TIMESTAMP WITH TIME ZONE DEFAULT NOW() NOT NULL,
            updated_at TIMESTAMP WITH TIME ZONE DEFAULT NOW() NOT NULL
        )
        """
    )
    op.execute(
        "CREATE INDEX IF NOT EXISTS ix_ai_company_subscriptions_company "
        "ON ai_company_subscriptions(company)"
    )

    op.execute(
        """
        CREATE TABLE IF NOT EXISTS revenue_events (
            id UUID PRIMARY KEY,
            site_id UUID NOT NULL REFERENCES sites(id) ON DELETE CASCADE,
            company VARCHAR(100),
            amount NUMERIC(12, 6) NOT NULL,
            source VARCHAR(20) NOT NULL,
            payment_intent_id VARCHAR(255),
            created_at TIMESTAMP WITH TIME ZONE DEFAULT NOW() NOT NULL
        )
        """
    )
    op.execute("CREATE INDEX IF NOT EXISTS ix_revenue_events_site_id ON revenue_events(site_id)")
    op.execute(
        "CREATE INDEX IF NOT EXISTS ix_revenue_events_created_at ON revenue_events(created_at)"
    )

    op.execute(
        """
        CREATE TABLE IF NOT EXISTS payments (
            id UUID PRIMARY KEY,
            site_id UUID NOT NULL REFERENCES sites(id) ON DELETE CASCADE,
            payment_intent_id VARCHAR(255) NOT NULL UNIQUE,
            amount NUMERIC(12, 6) NOT NULL,
            currency VARCHAR(3) NOT NULL DEFAULT 'usd',
            status VARCHAR(20) NOT NULL DEFAULT 'succeeded',

            -- Split
            stripe_fee NUMERIC(12, 6) NOT NULL,
            platform_fee NUMERIC(12, 6) NOT NULL,
            creator_payout NUMERIC(12, 6) NOT NULL,
            transfer_id VARCHAR(255),

            extra_data JSONB,
            created_at TIMESTAMP WITH TIME ZONE DEFAULT NOW() NOT NULL
        )
        """
    )
    op.execute("CREATE INDEX IF NOT EXISTS ix_payments_site_id ON payments(site_id)")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS payments")
    op.execute("DROP TABLE IF EXISTS revenue_events")
    op.execute("DROP TABLE IF EXISTS ai_company_subscriptions")
    op.execute("DROP TABLE IF EXISTS bot_requests")
    op.execute("DROP TABLE IF EXISTS sites")
