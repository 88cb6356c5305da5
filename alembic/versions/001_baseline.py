"""Baseline migration - site schema

Revision ID: 001
Revises: 
Create Date: 2026-10-18 10:00:00.000000

Creates every table the application reads and writes, the unique indexes the
accessors rely on (legal page slug, one visa package per country) and the
remote procedures called through the REST gateway.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create tables, indexes and remote procedures."""

    op.execute('CREATE EXTENSION IF NOT EXISTS "pgcrypto"')

    # Create countries table
    op.execute("""
        CREATE TABLE IF NOT EXISTS countries (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            name TEXT NOT NULL,
            flag TEXT,
            banner TEXT,
            description TEXT,
            entry_type TEXT,
            validity TEXT,
            processing_time TEXT,
            length_of_stay TEXT,
            visa_includes JSONB DEFAULT '[]'::jsonb,
            visa_assistance JSONB DEFAULT '[]'::jsonb,
            embassy_details JSONB DEFAULT '{}'::jsonb,
            processing_steps JSONB DEFAULT '[]'::jsonb,
            faq JSONB DEFAULT '[]'::jsonb,
            requirements_description TEXT,
            popularity INTEGER DEFAULT 0,
            min_price NUMERIC,
            created_at TIMESTAMPTZ DEFAULT NOW(),
            updated_at TIMESTAMPTZ DEFAULT NOW()
        )
    """)

    # Create visa_packages table (one package per country)
    op.execute("""
        CREATE TABLE IF NOT EXISTS visa_packages (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            country_id UUID NOT NULL UNIQUE REFERENCES countries (id) ON DELETE CASCADE,
            name TEXT NOT NULL DEFAULT 'Visa Package',
            government_fee NUMERIC NOT NULL DEFAULT 0,
            service_fee NUMERIC NOT NULL DEFAULT 0,
            processing_days INTEGER NOT NULL DEFAULT 15,
            processing_time TEXT,
            total_price NUMERIC DEFAULT 0,
            price NUMERIC DEFAULT 0,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)

    # Create visa_pricing_tiers table
    op.execute("""
        CREATE TABLE IF NOT EXISTS visa_pricing_tiers (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            country_id UUID NOT NULL REFERENCES countries (id) ON DELETE CASCADE,
            name TEXT NOT NULL,
            price TEXT NOT NULL DEFAULT '',
            processing_time TEXT DEFAULT '',
            features JSONB DEFAULT '[]'::jsonb,
            is_recommended BOOLEAN DEFAULT FALSE,
            created_at TIMESTAMPTZ DEFAULT NOW()
        )
    """)

    # Create document_checklist table
    op.execute("""
        CREATE TABLE IF NOT EXISTS document_checklist (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            country_id UUID NOT NULL REFERENCES countries (id) ON DELETE CASCADE,
            document_name TEXT NOT NULL,
            document_description TEXT DEFAULT '',
            required BOOLEAN NOT NULL DEFAULT TRUE,
            created_at TIMESTAMPTZ DEFAULT NOW()
        )
    """)

    # Create legal_pages table
    op.execute("""
        CREATE TABLE IF NOT EXISTS legal_pages (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            title TEXT NOT NULL,
            slug TEXT NOT NULL UNIQUE,
            content TEXT NOT NULL,
            last_updated TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            created_at TIMESTAMPTZ DEFAULT NOW()
        )
    """)

    # Create testimonials table
    op.execute("""
        CREATE TABLE IF NOT EXISTS testimonials (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            client_name TEXT NOT NULL,
            country TEXT DEFAULT '',
            visa_type TEXT DEFAULT '',
            rating INTEGER DEFAULT 5 CHECK (rating >= 1 AND rating <= 5),
            comment TEXT DEFAULT '',
            avatar_url TEXT,
            approved BOOLEAN NOT NULL DEFAULT FALSE,
            created_at TIMESTAMPTZ DEFAULT NOW(),
            updated_at TIMESTAMPTZ DEFAULT NOW()
        )
    """)

    # Create approved_visas table
    op.execute("""
        CREATE TABLE IF NOT EXISTS approved_visas (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            country TEXT NOT NULL,
            destination TEXT,
            visa_type TEXT DEFAULT '',
            visa_category TEXT,
            duration TEXT,
            image_url TEXT DEFAULT '',
            approval_date DATE,
            client_id UUID,
            created_at TIMESTAMPTZ DEFAULT NOW()
        )
    """)

    # Create addon_services table
    op.execute("""
        CREATE TABLE IF NOT EXISTS addon_services (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            name TEXT NOT NULL,
            description TEXT DEFAULT '',
            long_description TEXT,
            price NUMERIC NOT NULL DEFAULT 0,
            discount_percentage NUMERIC,
            delivery_days INTEGER DEFAULT 0,
            image_url TEXT DEFAULT '',
            requirements JSONB DEFAULT '[]'::jsonb,
            process JSONB DEFAULT '[]'::jsonb,
            faqs JSONB DEFAULT '[]'::jsonb,
            created_at TIMESTAMPTZ DEFAULT NOW(),
            updated_at TIMESTAMPTZ DEFAULT NOW()
        )
    """)

    # Create profiles table (contact form submissions land here)
    op.execute("""
        CREATE TABLE IF NOT EXISTS profiles (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            full_name TEXT,
            email TEXT,
            contact_message TEXT,
            contact_subject TEXT,
            contact_status TEXT DEFAULT 'new',
            role TEXT DEFAULT 'user',
            created_at TIMESTAMPTZ DEFAULT NOW()
        )
    """)

    # Create visa_applications table
    op.execute("""
        CREATE TABLE IF NOT EXISTS visa_applications (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            user_id UUID REFERENCES profiles (id) ON DELETE CASCADE,
            package_id UUID REFERENCES visa_packages (id) ON DELETE SET NULL,
            country_id UUID REFERENCES countries (id) ON DELETE SET NULL,
            visa_type_id UUID,
            status TEXT NOT NULL DEFAULT 'pending',
            next_step TEXT,
            submitted_date TIMESTAMPTZ DEFAULT NOW(),
            form_data JSONB DEFAULT '{}'::jsonb,
            created_at TIMESTAMPTZ DEFAULT NOW(),
            updated_at TIMESTAMPTZ DEFAULT NOW()
        )
    """)

    # Create application_documents table
    op.execute("""
        CREATE TABLE IF NOT EXISTS application_documents (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            application_id UUID NOT NULL REFERENCES visa_applications (id) ON DELETE CASCADE,
            document_type TEXT NOT NULL,
            file_url TEXT,
            status TEXT NOT NULL DEFAULT 'pending',
            feedback TEXT,
            uploaded_at TIMESTAMPTZ,
            created_at TIMESTAMPTZ DEFAULT NOW(),
            updated_at TIMESTAMPTZ DEFAULT NOW()
        )
    """)

    # Create application_timeline table
    op.execute("""
        CREATE TABLE IF NOT EXISTS application_timeline (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            application_id UUID NOT NULL REFERENCES visa_applications (id) ON DELETE CASCADE,
            event TEXT NOT NULL,
            date TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            description TEXT,
            created_at TIMESTAMPTZ DEFAULT NOW()
        )
    """)

    # Create indexes
    op.execute("CREATE INDEX IF NOT EXISTS idx_legal_pages_slug ON legal_pages (slug)")
    op.execute("CREATE INDEX IF NOT EXISTS idx_countries_popularity ON countries (popularity DESC)")
    op.execute(
        "CREATE INDEX IF NOT EXISTS idx_document_checklist_country "
        "ON document_checklist (country_id)"
    )
    op.execute(
        "CREATE INDEX IF NOT EXISTS idx_visa_pricing_tiers_country "
        "ON visa_pricing_tiers (country_id)"
    )
    op.execute(
        "CREATE INDEX IF NOT EXISTS idx_testimonials_approved "
        "ON testimonials (approved, created_at DESC)"
    )
    op.execute(
        "CREATE INDEX IF NOT EXISTS idx_application_documents_application "
        "ON application_documents (application_id)"
    )
    op.execute(
        "CREATE INDEX IF NOT EXISTS idx_application_timeline_application "
        "ON application_timeline (application_id, date DESC)"
    )

    # Remote procedures used by diagnostics and the schema repair cascade
    op.execute("""
        CREATE OR REPLACE FUNCTION get_table_info(p_table_name TEXT)
        RETURNS TABLE (column_name TEXT, data_type TEXT, is_nullable TEXT)
        LANGUAGE sql STABLE SECURITY DEFINER
        AS $$
            SELECT c.column_name::TEXT, c.data_type::TEXT, c.is_nullable::TEXT
            FROM information_schema.columns c
            WHERE c.table_schema = 'public' AND c.table_name = p_table_name
            ORDER BY c.ordinal_position
        $$
    """)

    op.execute("""
        CREATE OR REPLACE FUNCTION list_tables()
        RETURNS TABLE (table_name TEXT)
        LANGUAGE sql STABLE SECURITY DEFINER
        AS $$
            SELECT t.table_name::TEXT
            FROM information_schema.tables t
            WHERE t.table_schema = 'public' AND t.table_type = 'BASE TABLE'
            ORDER BY t.table_name
        $$
    """)

    op.execute("""
        CREATE OR REPLACE FUNCTION save_visa_package(
            p_country_id UUID,
            p_name TEXT,
            p_government_fee NUMERIC,
            p_service_fee NUMERIC,
            p_processing_days INTEGER
        )
        RETURNS SETOF visa_packages
        LANGUAGE sql SECURITY DEFINER
        AS $$
            INSERT INTO visa_packages (
                country_id, name, government_fee, service_fee, processing_days,
                processing_time, total_price, price
            )
            VALUES (
                p_country_id, p_name, p_government_fee, p_service_fee, p_processing_days,
                p_processing_days || ' days',
                p_government_fee + p_service_fee,
                p_government_fee + p_service_fee
            )
            ON CONFLICT (country_id) DO UPDATE SET
                name = EXCLUDED.name,
                government_fee = EXCLUDED.government_fee,
                service_fee = EXCLUDED.service_fee,
                processing_days = EXCLUDED.processing_days,
                processing_time = EXCLUDED.processing_time,
                total_price = EXCLUDED.total_price,
                price = EXCLUDED.price,
                updated_at = NOW()
            RETURNING *
        $$
    """)

    op.execute("""
        CREATE OR REPLACE FUNCTION create_legal_pages_table()
        RETURNS VOID
        LANGUAGE plpgsql SECURITY DEFINER
        AS $$
        BEGIN
            CREATE TABLE IF NOT EXISTS legal_pages (
                id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
                title TEXT NOT NULL,
                slug TEXT NOT NULL UNIQUE,
                content TEXT NOT NULL,
                last_updated TIMESTAMPTZ NOT NULL DEFAULT NOW(),
                created_at TIMESTAMPTZ DEFAULT NOW()
            );
            CREATE INDEX IF NOT EXISTS idx_legal_pages_slug ON legal_pages (slug);
        END
        $$
    """)


def downgrade() -> None:
    """Drop remote procedures and tables."""
    op.execute("DROP FUNCTION IF EXISTS create_legal_pages_table()")
    op.execute("DROP FUNCTION IF EXISTS save_visa_package(UUID, TEXT, NUMERIC, NUMERIC, INTEGER)")
    op.execute("DROP FUNCTION IF EXISTS list_tables()")
    op.execute("DROP FUNCTION IF EXISTS get_table_info(TEXT)")

    op.execute("DROP TABLE IF EXISTS application_timeline CASCADE")
    op.execute("DROP TABLE IF EXISTS application_documents CASCADE")
    op.execute("DROP TABLE IF EXISTS visa_applications CASCADE")
    op.execute("DROP TABLE IF EXISTS profiles CASCADE")
    op.execute("DROP TABLE IF EXISTS addon_services CASCADE")
    op.execute("DROP TABLE IF EXISTS approved_visas CASCADE")
    op.execute("DROP TABLE IF EXISTS testimonials CASCADE")
    op.execute("DROP TABLE IF EXISTS legal_pages CASCADE")
    op.execute("DROP TABLE IF EXISTS document_checklist CASCADE")
    op.execute("DROP TABLE IF EXISTS visa_pricing_tiers CASCADE")
    op.execute("DROP TABLE IF EXISTS visa_packages CASCADE")
    op.execute("DROP TABLE IF EXISTS countries CASCADE")
