from alembic import op
import sqlalchemy as sa


revision = "0001_create_books"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "books",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("author", sa.String(length=100), nullable=False),
        sa.Column("isbn", sa.String(length=13), nullable=False),
        sa.Column("published_date", sa.Date(), nullable=True),
        sa.UniqueConstraint("isbn", name="uq_books_isbn"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_books_id", "books", ["id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_books_id", table_name="books")
    op.drop_table("books")
