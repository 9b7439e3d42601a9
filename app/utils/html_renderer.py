import html
from datetime import datetime
from typing import List, Optional
from urllib.parse import quote

from app.v1_0.entities import UsersPageDTO
from app.v1_0.schemas import PostOut, PreferencesOut, UserOut, UserRole, UserStatus

ROLE_BADGE = {
    UserRole.ADMIN.value: "badge-destructive",
    UserRole.EDITOR.value: "badge-secondary",
}

STYLES = """
body { font-family: system-ui, sans-serif; margin: 0; background: #f8fafc; color: #0f172a; }
main { max-width: 72rem; margin: 0 auto; padding: 2.5rem 1rem; }
.card { background: #fff; border-radius: .5rem; box-shadow: 0 1px 2px rgba(0,0,0,.06); padding: 1.25rem; margin-bottom: 1.5rem; }
.card-header { display: flex; align-items: center; justify-content: space-between; gap: .5rem; }
table { width: 100%; border-collapse: collapse; font-size: .875rem; }
th, td { text-align: left; padding: .5rem; border-bottom: 1px solid #e2e8f0; }
.badge { display: inline-block; padding: .1rem .5rem; border-radius: 9999px; font-size: .75rem; border: 1px solid #cbd5e1; }
.badge-destructive { background: #dc2626; color: #fff; border-color: #dc2626; }
.badge-secondary { background: #e2e8f0; }
.badge-active { background: #22c55e; color: #fff; border-color: #22c55e; }
.badge-inactive { background: #ef4444; color: #fff; border-color: #ef4444; }
.btn { display: inline-block; padding: .3rem .75rem; border-radius: .375rem; border: 1px solid #cbd5e1; background: #fff; cursor: pointer; text-decoration: none; color: inherit; font-size: .875rem; }
.btn[disabled] { opacity: .5; cursor: default; }
.btn-primary { background: #2563eb; color: #fff; border-color: #2563eb; }
.btn-danger { background: #dc2626; color: #fff; border-color: #dc2626; }
.btn-success { background: #16a34a; color: #fff; border-color: #16a34a; }
.actions { display: flex; gap: .5rem; align-items: center; }
.muted { color: #64748b; }
.alert { padding: .75rem; border-radius: .375rem; margin-bottom: 1rem; }
.alert-success { background: #dcfce7; }
.alert-error { background: #fee2e2; }
form.inline { display: inline; }
"""

# Reload the page when the server revalidates the path it shows.
RELOAD_SCRIPT = """
<script>
(function () {
  var view = document.body.dataset.view;
  if (!view || !window.WebSocket) return;
  var proto = location.protocol === "https:" ? "wss://" : "ws://";
  var ws = new WebSocket(proto + location.host + "/ws/views");
  ws.onmessage = function (ev) {
    var msg = JSON.parse(ev.data);
    if (msg.type === "view.revalidated" && msg.payload.path === view) location.reload();
  };
})();
</script>
"""


def esc(value: object) -> str:
    return html.escape("" if value is None else str(value), quote=True)


def format_date(value: Optional[datetime], *, with_time: bool = False) -> str:
    """`Jan 5, 2025`, or `Jan 5, 2025 14:03` with `with_time`."""
    if value is None:
        return "-"
    out = f"{value:%b} {value.day}, {value.year}"
    if with_time:
        out += f" {value:%H:%M}"
    return out


class ConsoleRenderer:
    """Builds the console's server-rendered HTML pages."""

    def __init__(self, app_name: str = "User Console") -> None:
        self.app_name = app_name

    # ---- layout --------------------------------------------------------------

    def layout(self, title: str, body: str, *, view: Optional[str] = None) -> str:
        view_attr = f' data-view="{esc(view)}"' if view else ""
        return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1.0" />
    <title>{esc(title)} | {esc(self.app_name)}</title>
    <style>{STYLES}</style>
</head>
<body{view_attr}>
<main>
{body}
</main>
{RELOAD_SCRIPT if view else ""}
</body>
</html>"""

    # ---- fragments -----------------------------------------------------------

    @staticmethod
    def role_badges(roles: List[str]) -> str:
        return " ".join(
            f'<span class="badge {ROLE_BADGE.get(r, "badge-outline")}">{esc(r)}</span>' for r in roles
        )

    @staticmethod
    def status_badge(status: UserStatus) -> str:
        css = "badge-active" if status is UserStatus.ACTIVE else "badge-inactive"
        return f'<span class="badge {css}">{esc(status.value)}</span>'

    @staticmethod
    def toggle_form(user: UserOut, next_url: str) -> str:
        label = "Deactivate" if user.status is UserStatus.ACTIVE else "Activate"
        return f"""<form class="inline" method="post" action="/users/{esc(quote(user.id, safe=''))}/toggle-status">
    <input type="hidden" name="current_status" value="{esc(user.status.value)}" />
    <input type="hidden" name="next" value="{esc(next_url)}" />
    <button class="btn btn-primary" type="submit">{label}</button>
</form>"""

    # ---- pages ---------------------------------------------------------------

    def users_page(self, page: UsersPageDTO, users: List[UserOut]) -> str:
        """Paginated listing with per-row view / delete / toggle actions."""
        here = f"/users?page={page.page_number}"
        if not users:
            rows = '<tr><td colspan="8" class="muted" style="text-align:center">No users found</td></tr>'
        else:
            parts = []
            for i, u in enumerate(users):
                uid = esc(quote(u.id, safe=""))
                parts.append(f"""<tr>
    <td>{page.row_number(i)}</td>
    <td><strong>{esc(u.name)}</strong></td>
    <td>{esc(u.email)}</td>
    <td>{self.role_badges(u.roles)}</td>
    <td>{self.status_badge(u.status)}</td>
    <td>{format_date(u.created_at)}</td>
    <td>{format_date(u.updated_at)}</td>
    <td class="actions">
        <a class="btn" href="/users/{uid}">View</a>
        <form class="inline" method="post" action="/users/{uid}/delete-from-home">
            <input type="hidden" name="page" value="{page.page_number}" />
            <button class="btn btn-danger" type="submit">Delete</button>
        </form>
        {self.toggle_form(u, here)}
    </td>
</tr>""")
            rows = "\n".join(parts)

        if page.is_first:
            prev_btn = '<button class="btn" disabled>Previous</button>'
        else:
            prev_btn = f'<a class="btn" href="?page={page.page_number - 1}">Previous</a>'
        if page.is_last:
            next_btn = '<button class="btn" disabled>Next</button>'
        else:
            next_btn = f'<a class="btn" href="?page={page.page_number + 1}">Next</a>'

        body = f"""<section class="card">
    <div class="card-header">
        <h1>Users</h1>
        <a class="btn btn-primary" href="/users/add">+ Add User</a>
    </div>
    <table>
        <thead><tr>
            <th>#</th><th>Name</th><th>Email</th><th>Roles</th><th>Status</th>
            <th>Created</th><th>Updated</th><th>Actions</th>
        </tr></thead>
        <tbody>
{rows}
        </tbody>
    </table>
    <div class="card-header" style="margin-top:1.5rem">
        {prev_btn}
        <p class="muted">Page {page.page_number + 1} of {page.total_pages}</p>
        {next_btn}
    </div>
</section>"""
        return self.layout("Users", body, view="/users")

    def user_detail_page(
        self,
        user: UserOut,
        prefs: Optional[PreferencesOut],
        posts: List[PostOut],
    ) -> str:
        """Detail view: profile, preferences, posts and audit trail."""
        uid = esc(quote(user.id, safe=""))
        here = f"/users/{quote(user.id, safe='')}"

        if prefs is None:
            prefs_action = f"""<form method="post" action="/users/{uid}/preferences/default">
            <button class="btn btn-success" type="submit">Create Default Preferences</button>
        </form>"""
            prefs_body = '<p class="muted">No preferences found</p>'
        else:
            prefs_action = ""
            prefs_body = f"""<p><strong>Theme:</strong> {esc(prefs.theme)}</p>
        <p><strong>Language:</strong> {esc(prefs.language)}</p>
        <p><strong>Notifications:</strong> {"Enabled" if prefs.notifications_enabled else "Disabled"}</p>
        <p><strong>Last Updated:</strong> {format_date(prefs.updated_at)}</p>"""

        if not posts:
            posts_body = '<p class="muted">No posts found</p>'
        else:
            post_rows = "\n".join(
                f"""<tr>
    <td><strong>{esc(p.title)}</strong></td>
    <td>{esc(p.content)}</td>
    <td>{format_date(p.created_at)}</td>
    <td>{format_date(p.updated_at)}</td>
    <td>
        <form class="inline" method="post" action="/posts/{esc(quote(p.id, safe=''))}/delete">
            <input type="hidden" name="user_id" value="{esc(user.id)}" />
            <button class="btn btn-danger" type="submit">Delete</button>
        </form>
    </td>
</tr>"""
                for p in posts
            )
            posts_body = f"""<table>
        <thead><tr><th>Title</th><th>Content</th><th>Created</th><th>Updated</th><th>Actions</th></tr></thead>
        <tbody>
{post_rows}
        </tbody>
    </table>"""

        audit = ""
        if user.audit_trail:
            audit_rows = "\n".join(
                f"<tr><td>{esc(a.action)}</td><td>{esc(a.performed_by)}</td>"
                f"<td>{format_date(a.timestamp, with_time=True)}</td><td>{esc(a.details)}</td></tr>"
                for a in user.audit_trail
            )
            audit = f"""<section class="card">
    <h2>Audit Trail</h2>
    <table>
        <thead><tr><th>Action</th><th>Performed By</th><th>Timestamp</th><th>Details</th></tr></thead>
        <tbody>
{audit_rows}
        </tbody>
    </table>
</section>"""

        body = f"""<div class="card-header">
    <a class="btn" href="/users?page=0">&larr; Back to Users</a>
    <div class="actions">
        {self.toggle_form(user, here)}
        <form class="inline" method="post" action="/users/{uid}/delete">
            <button class="btn btn-danger" type="submit">Delete</button>
        </form>
    </div>
</div>
<section class="card">
    <h1>{esc(user.name)} {self.status_badge(user.status)}</h1>
    <p><strong>Username:</strong> {esc(user.username)}</p>
    <p><strong>Email:</strong> {esc(user.email)}</p>
    <p><strong>Roles:</strong> {self.role_badges(user.roles)}</p>
    <p><strong>Created:</strong> {format_date(user.created_at)}</p>
    <p><strong>Updated:</strong> {format_date(user.updated_at)}</p>
</section>
<section class="card">
    <div class="card-header">
        <h2>Preferences</h2>
        {prefs_action}
    </div>
    {prefs_body}
</section>
<section class="card">
    <div class="card-header">
        <h2>Posts</h2>
        <form class="actions" method="post" action="/users/{uid}/posts">
            <input name="title" placeholder="Title" required />
            <input name="content" placeholder="Content" required />
            <button class="btn btn-success" type="submit">Add Post</button>
        </form>
    </div>
    {posts_body}
</section>
{audit}"""
        return self.layout(user.name or "User", body, view=here)

    def add_user_page(self, *, success: bool = False, error: Optional[str] = None) -> str:
        banner = ""
        if success:
            banner = '<div class="alert alert-success">User added successfully.</div>'
        elif error:
            banner = f'<div class="alert alert-error">{esc(error)}</div>'

        checkboxes = "\n".join(
            f'<label><input type="checkbox" name="roles" value="{r.value}" /> {r.value}</label>'
            for r in UserRole
        )
        body = f"""<section class="card" style="max-width:28rem;margin:0 auto">
    <h1>Add New User</h1>
    {banner}
    <form method="post" action="/users/add">
        <p><label for="username">Username</label><br /><input id="username" name="username" required /></p>
        <p><label for="email">Email</label><br /><input id="email" name="email" type="email" required /></p>
        <p><label for="name">Full Name</label><br /><input id="name" name="name" required /></p>
        <p>Roles</p>
        <div class="actions">
{checkboxes}
        </div>
        <div class="actions" style="justify-content:flex-end;margin-top:1rem">
            <a class="btn" href="/users?page=0">Cancel</a>
            <button class="btn btn-primary" type="submit">Add User</button>
        </div>
    </form>
</section>"""
        return self.layout("Add User", body)

    def error_page(self, message: str, *, retry_url: str = "/users?page=0") -> str:
        body = f"""<section class="card" style="text-align:center">
    <h1 style="color:#dc2626">Oops! Something went wrong.</h1>
    <p class="muted">{esc(message)}</p>
    <a class="btn btn-primary" href="{esc(retry_url)}">Try Again</a>
</section>"""
        return self.layout("Error", body)

    def not_found_page(self, message: str = "User not found") -> str:
        body = f"""<section class="card" style="text-align:center">
    <h1>404</h1>
    <p class="muted">{esc(message)}</p>
    <a class="btn" href="/users?page=0">Back to Users</a>
</section>"""
        return self.layout("Not Found", body)
