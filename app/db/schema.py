from __future__ import annotations


def ensure_schema(conn) -> None:
    cur = conn.cursor()
    cur.execute(
        """
        DO $$
        BEGIN
            CREATE TYPE app_role AS ENUM ('admin', 'user');
        EXCEPTION
            WHEN duplicate_object THEN NULL;
        END $$;
        """
    )
    cur.execute(
        """
        CREATE TABLE IF NOT EXISTS user_roles (
            id uuid PRIMARY KEY DEFAULT gen_random_uuid(),
            user_id uuid NOT NULL,
            role app_role NOT NULL,
            UNIQUE (user_id, role)
        );
        """
    )
    cur.execute(
        """
        CREATE OR REPLACE FUNCTION has_role(_user_id uuid, _role app_role)
        RETURNS boolean
        LANGUAGE sql
        STABLE
        SECURITY DEFINER
        AS $$
            SELECT EXISTS (
                SELECT 1 FROM user_roles WHERE user_id = _user_id AND role = _role
            )
        $$;
        """
    )
    cur.execute(
        """
        CREATE TABLE IF NOT EXISTS raffles (
            id bigserial PRIMARY KEY,
            name text NOT NULL,
            description text,
            detailed_description text,
            rules text,
            prize_description text NOT NULL,
            ticket_price numeric(18,6) NOT NULL CHECK (ticket_price > 0),
            max_tickets int NOT NULL CHECK (max_tickets > 0),
            tickets_sold int DEFAULT 0,
            nft_collection_address text NOT NULL,
            contract_raffle_id bigint,
            network text NOT NULL DEFAULT 'sepolia',
            image_url text,
            gallery_images text[],
            status text DEFAULT 'active',
            draw_date timestamptz,
            winner_address text,
            draw_tx_hash text,
            completed_at timestamptz,
            created_at timestamptz NOT NULL DEFAULT now()
        );
        """
    )
    cur.execute(
        """
        CREATE TABLE IF NOT EXISTS tickets (
            id uuid PRIMARY KEY DEFAULT gen_random_uuid(),
            raffle_id bigint NOT NULL REFERENCES raffles(id) ON DELETE CASCADE,
            user_id uuid NOT NULL,
            wallet_address text NOT NULL,
            ticket_number int NOT NULL,
            quantity int NOT NULL DEFAULT 1 CHECK (quantity > 0),
            purchase_price numeric(18,6) NOT NULL,
            purchased_at timestamptz NOT NULL DEFAULT now(),
            tx_hash text NOT NULL
        );
        """
    )
    cur.execute("CREATE INDEX IF NOT EXISTS tickets_user_id_idx ON tickets (user_id);")
    cur.execute(
        """
        CREATE TABLE IF NOT EXISTS prize_claims (
            id uuid PRIMARY KEY DEFAULT gen_random_uuid(),
            raffle_id bigint NOT NULL REFERENCES raffles(id) ON DELETE CASCADE,
            user_id uuid NOT NULL,
            delivery_info text NOT NULL,
            status text NOT NULL DEFAULT 'pending',
            created_at timestamptz NOT NULL DEFAULT now(),
            processed_at timestamptz
        );
        """
    )
    cur.execute(
        """
        CREATE TABLE IF NOT EXISTS referral_tiers (
            tier_level int PRIMARY KEY,
            tier_name text NOT NULL,
            required_points int NOT NULL UNIQUE CHECK (required_points >= 0),
            icon text NOT NULL DEFAULT '',
            benefits text NOT NULL DEFAULT ''
        );
        """
    )
    cur.execute(
        """
        CREATE TABLE IF NOT EXISTS referral_points (
            id uuid PRIMARY KEY DEFAULT gen_random_uuid(),
            user_id uuid NOT NULL,
            points_earned numeric(12,2) NOT NULL,
            created_at timestamptz NOT NULL DEFAULT now()
        );
        """
    )
    cur.execute(
        "CREATE INDEX IF NOT EXISTS referral_points_user_id_idx ON referral_points (user_id);"
    )
    cur.execute(
        """
        CREATE TABLE IF NOT EXISTS referrals (
            id uuid PRIMARY KEY DEFAULT gen_random_uuid(),
            referrer_id uuid NOT NULL,
            referred_id uuid NOT NULL UNIQUE,
            referral_code text NOT NULL,
            created_at timestamptz DEFAULT now()
        );
        """
    )
    cur.execute("CREATE INDEX IF NOT EXISTS referrals_code_idx ON referrals (referral_code);")
    cur.execute(
        """
        CREATE TABLE IF NOT EXISTS refunds (
            id uuid PRIMARY KEY DEFAULT gen_random_uuid(),
            raffle_id bigint NOT NULL REFERENCES raffles(id) ON DELETE CASCADE,
            user_id uuid NOT NULL,
            wallet_address text NOT NULL,
            amount numeric(18,6) NOT NULL,
            status text NOT NULL DEFAULT 'pending',
            tx_hash text,
            created_at timestamptz NOT NULL DEFAULT now(),
            processed_at timestamptz,
            UNIQUE (raffle_id, wallet_address)
        );
        """
    )
    conn.commit()
    cur.close()
