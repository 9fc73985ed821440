# sociate/cli.py
import typer

from sociate.db import get_session, init_db
from sociate.logging_config import setup_logging
from sociate.services import seeder
from sociate.services.conversations import list_conversations
from sociate.services.feed import get_feed

app = typer.Typer(help="Sociate CLI with subcommands")


@app.callback()
def main(log_level: str = typer.Option("WARNING", "--log-level", help="Log level for this run")):
    setup_logging(log_level)


@app.command("init-db")
def init_db_cmd():
    """Create all tables in DATABASE_URL."""
    try:
        init_db()
    except Exception as e:
        typer.echo(f"❌ Could not initialise the database: {e}", err=True)
        raise typer.Exit(1)
    typer.echo("✓ Schema ready")


@app.command("seed")
def seed_cmd(
    users: int = typer.Option(50, help="Number of users", min=2),
    posts: int = typer.Option(300, help="Number of posts", min=0),
    conversations: int = typer.Option(40, help="Number of conversations", min=0),
):
    """Populate the database with reproducible demo data."""
    seeder.seed_random_generators()

    init_db()
    with get_session() as db:
        us = seeder.make_users(db, users)
        seeder.make_follows(db, us)
        ps = seeder.make_posts(db, us, posts)
        seeder.make_engagement(db, ps, us)
        convs = seeder.make_conversations(db, us, conversations)
    typer.echo(f"Seed complete: users={users}, posts={posts}, conversations={len(convs)}")


@app.command("feed")
def feed_cmd(
    user_id: str = typer.Argument(None, help="Viewer id; omit for the public timeline"),
    limit: int = typer.Option(10, "--limit", "-l", help="Number of posts to show (1-50)", min=1, max=50),
):
    """Print a user's feed."""
    try:
        with get_session() as db:
            items = get_feed(db, user_id, limit=limit)
    except Exception as e:
        typer.echo(f"❌ Error loading feed: {e}", err=True)
        raise typer.Exit(1)

    if not items:
        typer.echo("No posts to show")
        return

    title = f"Feed for {user_id}" if user_id else "Public timeline"
    typer.echo(f"\n📰 {title}:")
    typer.echo("─" * 60)
    for i, post in enumerate(items, 1):
        typer.echo(f"{i:2d}. @{post['username']:<20} {post['createdAt']}")
        if post["caption"]:
            typer.echo(f"    {post['caption']}")
        typer.echo(f"    ♥ {len(post['likes'])}  💬 {len(post['comments'])}")


@app.command("inbox")
def inbox_cmd(user_id: str = typer.Argument(..., help="User whose conversations to list")):
    """Print a user's conversations with their latest message."""
    try:
        with get_session() as db:
            items = list_conversations(db, user_id)
    except Exception as e:
        typer.echo(f"❌ Error loading conversations: {e}", err=True)
        raise typer.Exit(1)

    if not items:
        typer.echo("No conversations yet")
        return

    typer.echo(f"\n✉️  Conversations for {user_id}:")
    typer.echo("─" * 60)
    for conv in items:
        other = conv["otherUser"]["username"] if conv["otherUser"] else "(unknown user)"
        last = conv["lastMessage"]
        preview = (last["content"] or "[media]") if last else "(no messages)"
        typer.echo(f"@{other:<20} {preview}")


@app.command("serve")
def serve_cmd(
    host: str = typer.Option("0.0.0.0", help="Bind address"),
    port: int = typer.Option(8000, help="Port"),
    reload: bool = typer.Option(False, help="Reload on code changes"),
):
    """Run the API with uvicorn."""
    import uvicorn

    uvicorn.run("sociate.main:app", host=host, port=port, reload=reload, log_level="info")


if __name__ == "__main__":
    app()
