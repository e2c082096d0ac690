"""Initial schema

Revision ID: 001_initial
Revises:
Create Date: 2025-03-01 00:00:00.000000

Creates customers, quotes/quote_items, invoices/invoice_items and
tickets/ticket_passengers/ticket_segments.
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001_initial'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # --- customers ---
    op.create_table(
        'customers',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('type', sa.Enum('individual', 'corporate', name='customertype'), nullable=False),
        sa.Column('email', sa.String(), nullable=True),
        sa.Column('phone', sa.String(), nullable=True),
        sa.Column('address', sa.String(), nullable=True),
        sa.Column('tax_number', sa.String(), nullable=True),
        sa.Column('tax_office', sa.String(), nullable=True),
        sa.Column('contact_person', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_customers_id'), 'customers', ['id'], unique=False)
    op.create_index(op.f('ix_customers_user_id'), 'customers', ['user_id'], unique=False)

    # --- quotes ---
    op.create_table(
        'quotes',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('customer_id', sa.String(), nullable=False),
        sa.Column('quote_number', sa.String(), nullable=False),
        sa.Column('issue_date', sa.Date(), nullable=False),
        sa.Column('expiry_date', sa.Date(), nullable=False),
        sa.Column('status', sa.Enum('draft', 'sent', 'accepted', 'rejected', 'converted', name='quotestatus'), nullable=False),
        sa.Column('subtotal', sa.Numeric(), nullable=False),
        sa.Column('tax_rate', sa.Numeric(), nullable=False),
        sa.Column('tax_amount', sa.Numeric(), nullable=False),
        sa.Column('total_amount', sa.Numeric(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['customer_id'], ['customers.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('quote_number', name='quotes_quote_number_key')
    )
    op.create_index(op.f('ix_quotes_id'), 'quotes', ['id'], unique=False)
    op.create_index(op.f('ix_quotes_user_id'), 'quotes', ['user_id'], unique=False)

    op.create_table(
        'quote_items',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('quote_id', sa.String(), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.String(), nullable=True),
        sa.Column('description', sa.String(), nullable=False),
        sa.Column('quantity', sa.Numeric(), nullable=False),
        sa.Column('unit_price', sa.Numeric(), nullable=False),
        sa.Column('amount', sa.Numeric(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.ForeignKeyConstraint(['quote_id'], ['quotes.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_quote_items_id'), 'quote_items', ['id'], unique=False)
    op.create_index(op.f('ix_quote_items_quote_id'), 'quote_items', ['quote_id'], unique=False)

    # --- invoices ---
    op.create_table(
        'invoices',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('customer_id', sa.String(), nullable=False),
        sa.Column('quote_id', sa.String(), nullable=True),
        sa.Column('invoice_number', sa.String(), nullable=False),
        sa.Column('invoice_date', sa.Date(), nullable=False),
        sa.Column('due_date', sa.Date(), nullable=False),
        sa.Column('status', sa.Enum('draft', 'sent', 'paid', 'cancelled', name='invoicestatus'), nullable=False),
        sa.Column('subtotal', sa.Numeric(), nullable=False),
        sa.Column('tax_amount', sa.Numeric(), nullable=False),
        sa.Column('total_amount', sa.Numeric(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['customer_id'], ['customers.id'], ),
        sa.ForeignKeyConstraint(['quote_id'], ['quotes.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('invoice_number', name='invoices_invoice_number_key')
    )
    op.create_index(op.f('ix_invoices_id'), 'invoices', ['id'], unique=False)
    op.create_index(op.f('ix_invoices_user_id'), 'invoices', ['user_id'], unique=False)

    op.create_table(
        'invoice_items',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('invoice_id', sa.String(), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('description', sa.String(), nullable=False),
        sa.Column('quantity', sa.Numeric(), nullable=False),
        sa.Column('unit_price', sa.Numeric(), nullable=False),
        sa.Column('tax_rate', sa.Numeric(), nullable=False),
        sa.Column('amount', sa.Numeric(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.ForeignKeyConstraint(['invoice_id'], ['invoices.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_invoice_items_id'), 'invoice_items', ['id'], unique=False)
    op.create_index(op.f('ix_invoice_items_invoice_id'), 'invoice_items', ['invoice_id'], unique=False)

    # --- tickets ---
    op.create_table(
        'tickets',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('customer_id', sa.String(), nullable=True),
        sa.Column('pnr_code', sa.String(), nullable=False),
        sa.Column('issue_date', sa.Date(), nullable=False),
        sa.Column('base_fare', sa.Numeric(), nullable=False),
        sa.Column('tax_amount', sa.Numeric(), nullable=False),
        sa.Column('service_fee', sa.Numeric(), nullable=False),
        sa.Column('status', sa.Enum('sales', 'void', 'refund', name='ticketstatus'), nullable=False),
        sa.Column('invoice_status', sa.Enum('pending', 'invoiced', name='ticketinvoicestatus'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['customer_id'], ['customers.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_tickets_id'), 'tickets', ['id'], unique=False)
    op.create_index(op.f('ix_tickets_user_id'), 'tickets', ['user_id'], unique=False)
    op.create_index(op.f('ix_tickets_pnr_code'), 'tickets', ['pnr_code'], unique=False)

    op.create_table(
        'ticket_passengers',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('ticket_id', sa.String(), nullable=False),
        sa.Column('passenger_name', sa.String(), nullable=False),
        sa.Column('ticket_number', sa.String(), nullable=True),
        sa.Column('passenger_type', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.ForeignKeyConstraint(['ticket_id'], ['tickets.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_ticket_passengers_id'), 'ticket_passengers', ['id'], unique=False)
    op.create_index(op.f('ix_ticket_passengers_ticket_id'), 'ticket_passengers', ['ticket_id'], unique=False)

    op.create_table(
        'ticket_segments',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('ticket_id', sa.String(), nullable=False),
        sa.Column('airline', sa.String(), nullable=True),
        sa.Column('flight_no', sa.String(), nullable=True),
        sa.Column('origin', sa.String(), nullable=False),
        sa.Column('destination', sa.String(), nullable=False),
        sa.Column('flight_date', sa.Date(), nullable=False),
        sa.Column('flight_time', sa.String(), nullable=True),
        sa.Column('check_in_open_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.ForeignKeyConstraint(['ticket_id'], ['tickets.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_ticket_segments_id'), 'ticket_segments', ['id'], unique=False)
    op.create_index(op.f('ix_ticket_segments_ticket_id'), 'ticket_segments', ['ticket_id'], unique=False)


def downgrade() -> None:
    op.drop_table('ticket_segments')
    op.drop_table('ticket_passengers')
    op.drop_table('tickets')
    op.drop_table('invoice_items')
    op.drop_table('invoices')
    op.drop_table('quote_items')
    op.drop_table('quotes')
    op.drop_table('customers')
    op.execute('DROP TYPE IF EXISTS ticketinvoicestatus')
    op.execute('DROP TYPE IF EXISTS ticketstatus')
    op.execute('DROP TYPE IF EXISTS invoicestatus')
    op.execute('DROP TYPE IF EXISTS quotestatus')
    op.execute('DROP TYPE IF EXISTS customertype')
