"""Static HTML for the single-page dashboard (served at ``/``).

The page talks only to the ``/v1`` JSON API. It keeps the session in
``localStorage``, refreshes the token five minutes before it expires, polls
the overview stats every 30 seconds and shows unread notifications as toasts.
"""

DASHBOARD_HTML = r"""
<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1" />
  <title>Nexus Admin</title>
  <style>
    :root {
      --bg: #0b1120;
      --panel: #111a2e;
      --panel-2: #16213a;
      --text: #e6edf7;
      --muted: #94a3b8;
      --accent: #6366f1;
      --accent-2: #22d3ee;
      --danger: #f87171;
      --warn: #fbbf24;
      --success: #34d399;
      --info: #60a5fa;
      --border: rgba(255, 255, 255, 0.07);
      --radius: 12px;
      --font: "Inter", "Segoe UI", system-ui, -apple-system, sans-serif;
    }
    * { box-sizing: border-box; }
    body { margin: 0; font-family: var(--font); background: var(--bg); color: var(--text); min-height: 100vh; }
    button, input, select { font: inherit; }
    button {
      background: var(--accent); color: #fff; border: 0; border-radius: 8px;
      padding: 8px 14px; cursor: pointer;
    }
    button.ghost { background: transparent; border: 1px solid var(--border); color: var(--text); }
    button.danger { background: var(--danger); }
    button:disabled { opacity: 0.5; cursor: default; }
    input, select {
      background: var(--panel-2); color: var(--text); border: 1px solid var(--border);
      border-radius: 8px; padding: 8px 10px;
    }
    .hidden { display: none !important; }
    .muted { color: var(--muted); }
    .error-text { color: var(--danger); font-size: 13px; min-height: 18px; }

    #login-view { display: grid; place-items: center; min-height: 100vh; }
    .login-card { background: var(--panel); padding: 32px; border-radius: var(--radius); width: 360px; border: 1px solid var(--border); }
    .login-card h1 { margin-top: 0; }
    .field { display: grid; gap: 6px; margin-bottom: 14px; }

    #app-view { display: grid; grid-template-columns: 220px 1fr; min-height: 100vh; }
    aside { background: var(--panel); border-right: 1px solid var(--border); padding: 20px 14px; }
    aside .brand { font-weight: 700; font-size: 18px; margin-bottom: 24px; }
    aside nav a {
      display: block; padding: 9px 12px; border-radius: 8px; color: var(--muted);
      text-decoration: none; margin-bottom: 4px; cursor: pointer;
    }
    aside nav a.active, aside nav a:hover { background: var(--panel-2); color: var(--text); }
    main { padding: 24px 28px 48px; }
    header { display: flex; justify-content: space-between; align-items: center; margin-bottom: 20px; }

    .cards { display: grid; grid-template-columns: repeat(auto-fit, minmax(200px, 1fr)); gap: 14px; margin-bottom: 18px; }
    .card { background: var(--panel); border: 1px solid var(--border); border-radius: var(--radius); padding: 16px; }
    .card .label { color: var(--muted); font-size: 13px; }
    .card .value { font-size: 26px; font-weight: 700; margin-top: 6px; }
    .card .delta.up { color: var(--success); }
    .card .delta.down { color: var(--danger); }
    .status-stable { color: var(--success); }
    .status-warning { color: var(--warn); }
    .status-critical { color: var(--danger); }
    .grid-2 { display: grid; grid-template-columns: repeat(auto-fit, minmax(320px, 1fr)); gap: 14px; margin-bottom: 18px; }
    canvas { width: 100%; height: 200px; }

    table { width: 100%; border-collapse: collapse; }
    th, td { text-align: left; padding: 9px 8px; border-bottom: 1px solid var(--border); font-size: 14px; }
    th.sortable { cursor: pointer; user-select: none; }
    .badge { padding: 2px 8px; border-radius: 999px; font-size: 12px; background: var(--panel-2); }
    .toolbar { display: flex; gap: 10px; flex-wrap: wrap; align-items: center; margin-bottom: 12px; }
    .pager { display: flex; gap: 8px; align-items: center; justify-content: flex-end; margin-top: 12px; }
    .tabs { display: flex; gap: 8px; margin-bottom: 14px; }
    .tabs button.active { background: var(--accent-2); color: #0b1120; }
    ul.feed { list-style: none; padding: 0; margin: 0; }
    ul.feed li { padding: 8px 0; border-bottom: 1px solid var(--border); font-size: 14px; }

    .modal-backdrop { position: fixed; inset: 0; background: rgba(0, 0, 0, 0.55); display: grid; place-items: center; }
    .modal { background: var(--panel); border-radius: var(--radius); padding: 22px; width: 400px; border: 1px solid var(--border); }

    #toasts { position: fixed; top: 16px; right: 16px; display: grid; gap: 8px; z-index: 50; }
    .toast {
      min-width: 280px; max-width: 360px; padding: 12px 14px; border-radius: 10px;
      background: var(--panel-2); border-left: 4px solid var(--info); box-shadow: 0 8px 30px rgba(0,0,0,0.4);
    }
    .toast.success { border-color: var(--success); }
    .toast.error { border-color: var(--danger); }
    .toast.warning { border-color: var(--warn); }
    .toast .title { font-weight: 600; display: flex; justify-content: space-between; gap: 8px; }
    .toast .close { background: none; padding: 0 4px; color: var(--muted); }
  </style>
</head>
<body>
  <div id="toasts"></div>

  <section id="login-view" class="hidden">
    <form class="login-card" id="login-form" novalidate>
      <h1>Nexus Admin</h1>
      <p class="muted">Sign in with a seeded account, e.g. admin@nexus.com.</p>
      <div class="field">
        <label for="login-email">Email</label>
        <input id="login-email" type="email" autocomplete="username" />
      </div>
      <div class="field">
        <label for="login-password">Password</label>
        <input id="login-password" type="password" autocomplete="current-password" />
      </div>
      <label class="muted"><input id="login-remember" type="checkbox" /> Remember me</label>
      <p class="error-text" id="login-error"></p>
      <button type="submit" id="login-submit">Sign in</button>
    </form>
  </section>

  <section id="app-view" class="hidden">
    <aside>
      <div class="brand" id="site-name">Nexus Admin</div>
      <nav id="nav"></nav>
    </aside>
    <main>
      <header>
        <h2 id="page-title">Dashboard</h2>
        <div>
          <span class="muted" id="current-user"></span>
          <button class="ghost" id="logout-btn">Log out</button>
        </div>
      </header>

      <div id="panel-dashboard" class="panel">
        <div class="cards" id="stats-cards"></div>
        <div class="grid-2">
          <div class="card"><div class="label">User growth</div><canvas id="chart-growth"></canvas></div>
          <div class="card"><div class="label">Weekly revenue</div><canvas id="chart-revenue"></canvas></div>
          <div class="card"><div class="label">Traffic sources (%)</div><canvas id="chart-traffic"></canvas></div>
          <div class="card"><div class="label">Recent activity</div><ul class="feed" id="activity-feed"></ul></div>
        </div>
      </div>

      <div id="panel-users" class="panel hidden">
        <div class="toolbar">
          <input id="user-search" placeholder="Search name or email" />
          <select id="user-role">
            <option value="">All roles</option>
            <option value="admin">Admin</option>
            <option value="moderator">Moderator</option>
            <option value="user">User</option>
          </select>
          <select id="user-status">
            <option value="">All statuses</option>
            <option value="active">Active</option>
            <option value="inactive">Inactive</option>
            <option value="banned">Banned</option>
            <option value="pending">Pending</option>
          </select>
          <button id="user-add">Add user</button>
          <button class="danger" id="user-bulk-delete" disabled>Delete selected</button>
        </div>
        <div class="card">
          <table id="users-table">
            <thead>
              <tr>
                <th><input type="checkbox" id="user-select-all" /></th>
                <th class="sortable" data-sort="name">Name</th>
                <th class="sortable" data-sort="email">Email</th>
                <th class="sortable" data-sort="role">Role</th>
                <th class="sortable" data-sort="status">Status</th>
                <th class="sortable" data-sort="created_at">Created</th>
                <th></th>
              </tr>
            </thead>
            <tbody></tbody>
          </table>
          <div class="pager">
            <span class="muted" id="user-page-info"></span>
            <button class="ghost" id="user-prev">Prev</button>
            <button class="ghost" id="user-next">Next</button>
          </div>
        </div>
      </div>

      <div id="panel-analytics" class="panel hidden">
        <div class="cards" id="analytics-cards"></div>
        <div class="grid-2">
          <div class="card"><div class="label">Page views</div><canvas id="chart-page-views"></canvas></div>
          <div class="card"><div class="label">Bounce rate by page (%)</div><canvas id="chart-bounce-rate"></canvas></div>
          <div class="card"><div class="label">Devices (%)</div><canvas id="chart-devices"></canvas></div>
          <div class="card"><div class="label">Browsers (%)</div><canvas id="chart-browsers"></canvas></div>
          <div class="card"><div class="label">Top pages</div><table id="top-pages"><tbody></tbody></table></div>
          <div class="card"><div class="label">Geography</div><table id="geography"><tbody></tbody></table></div>
        </div>
      </div>

      <div id="panel-reports" class="panel hidden">
        <div class="card">
          <div class="toolbar">
            <select id="report-type"></select>
            <select id="report-range"></select>
            <input type="date" id="report-start" class="hidden" />
            <input type="date" id="report-end" class="hidden" />
            <button id="report-generate">Generate</button>
          </div>
          <div id="report-result"></div>
        </div>
        <div class="card" style="margin-top:14px;">
          <div class="label">History</div>
          <table id="report-history"><tbody></tbody></table>
        </div>
      </div>

      <div id="panel-settings" class="panel hidden">
        <div class="tabs">
          <button class="active" data-tab="general">General</button>
          <button class="ghost" data-tab="security">Security</button>
          <button class="ghost" data-tab="api-keys">API keys</button>
        </div>
        <form class="card settings-tab" id="tab-general">
          <div class="field"><label>Site name</label><input name="site_name" /></div>
          <div class="field"><label>Description</label><input name="site_description" /></div>
          <label><input type="checkbox" name="maintenance_mode" /> Maintenance mode</label><br />
          <label><input type="checkbox" name="allow_registration" /> Allow registration</label><br />
          <label><input type="checkbox" name="require_email_verification" /> Require email verification</label>
          <div class="field" style="margin-top:12px;"><label>Default role</label>
            <select name="default_user_role"><option>user</option><option>moderator</option><option>admin</option></select>
          </div>
          <button type="submit">Save</button>
        </form>
        <form class="card settings-tab hidden" id="tab-security">
          <div class="field"><label>Session timeout (seconds)</label><input type="number" min="1" name="session_timeout" /></div>
          <div class="field"><label>Max login attempts</label><input type="number" min="1" name="max_login_attempts" /></div>
          <div class="field"><label>Rate limit (requests)</label><input type="number" min="1" name="rate_limit_requests" /></div>
          <div class="field"><label>Rate limit window (seconds)</label><input type="number" min="1" name="rate_limit_window" /></div>
          <p class="muted" id="rate-limit-status"></p>
          <button type="submit">Save</button>
        </form>
        <div class="card settings-tab hidden" id="tab-api-keys">
          <div class="toolbar">
            <input id="key-name" placeholder="Key name" />
            <label><input type="checkbox" class="key-perm" value="read" checked /> read</label>
            <label><input type="checkbox" class="key-perm" value="write" /> write</label>
            <label><input type="checkbox" class="key-perm" value="delete" /> delete</label>
            <button id="key-create">Create key</button>
          </div>
          <table id="api-keys"><tbody></tbody></table>
        </div>
      </div>
    </main>
  </section>

  <div id="modal-root"></div>

  <script>
    const SESSION_KEY = "nexus.session";
    const REFRESH_MARGIN_S = 5 * 60;
    const STATS_POLL_MS = 30000;
    const NOTIFY_POLL_MS = 10000;
    const SEARCH_DEBOUNCE_MS = 500;
    const EMAIL_RE = /^[^\s@]+@[^\s@]+\.[^\s@]+$/;

    const state = {
      session: null,
      nav: [],
      view: "dashboard",
      users: { page: 1, limit: 10, search: "", role: "", status: "", sortBy: "created_at", sortOrder: "desc", selected: new Set(), totalPages: 0 },
      refreshTimer: null,
      statsTimer: null,
      notifyTimer: null,
      shownToasts: new Set(),
    };

    class ApiError extends Error {
      constructor(status, body) {
        const err = (body && body.error) || {};
        super(err.message || ("Request failed: " + status));
        this.status = status;
        this.code = err.code;
        this.details = err.details;
      }
    }

    const api = {
      async request(method, url, body, { raw = false, retry = true } = {}) {
        const headers = { "Content-Type": "application/json" };
        if (state.session) headers["Authorization"] = "Bearer " + state.session.token;
        const res = await fetch(url, { method, headers, body: body === undefined ? undefined : JSON.stringify(body) });
        if (res.status === 401 && retry && state.session && state.session.refresh_token) {
          if (await refreshSession()) return this.request(method, url, body, { raw, retry: false });
        }
        if (raw && res.ok) return res;
        const text = await res.text();
        const data = text ? JSON.parse(text) : {};
        if (!res.ok) {
          if (res.status === 401) endSession();
          throw new ApiError(res.status, data);
        }
        return data.data;
      },
      get(url) { return this.request("GET", url); },
      post(url, body) { return this.request("POST", url, body === undefined ? {} : body); },
      patch(url, body) { return this.request("PATCH", url, body); },
      del(url, body) { return this.request("DELETE", url, body); },
    };

    // Session

    function saveSession(session) {
      state.session = session;
      if (session) localStorage.setItem(SESSION_KEY, JSON.stringify(session));
      else localStorage.removeItem(SESSION_KEY);
      scheduleRefresh();
    }

    function loadSession() {
      try { return JSON.parse(localStorage.getItem(SESSION_KEY)); } catch (e) { return null; }
    }

    function scheduleRefresh() {
      clearTimeout(state.refreshTimer);
      if (!state.session) return;
      const delayS = state.session.expires_at - REFRESH_MARGIN_S - Date.now() / 1000;
      state.refreshTimer = setTimeout(refreshSession, Math.max(0, delayS * 1000));
    }

    async function refreshSession() {
      if (!state.session) return false;
      try {
        const res = await fetch("/v1/auth/refresh", {
          method: "POST",
          headers: { "Content-Type": "application/json" },
          body: JSON.stringify({ refresh_token: state.session.refresh_token }),
        });
        if (!res.ok) { endSession(); return false; }
        saveSession((await res.json()).data);
        return true;
      } catch (e) {
        return false;
      }
    }

    function endSession() {
      saveSession(null);
      clearInterval(state.statsTimer);
      clearInterval(state.notifyTimer);
      show("login-view");
    }

    function show(id) {
      document.getElementById("login-view").classList.toggle("hidden", id !== "login-view");
      document.getElementById("app-view").classList.toggle("hidden", id !== "app-view");
    }

    // Toasts

    function showToast(type, title, message, duration) {
      const root = document.getElementById("toasts");
      const el = document.createElement("div");
      el.className = "toast " + type;
      el.innerHTML = `<div class="title"><span></span><button class="close">&times;</button></div><div class="msg"></div>`;
      el.querySelector(".title span").textContent = title;
      el.querySelector(".msg").textContent = message;
      el.querySelector(".close").onclick = () => el.remove();
      root.appendChild(el);
      if (duration > 0) setTimeout(() => el.remove(), duration);
    }

    function showError(err) {
      showToast("error", "Error", err.message || String(err), 8000);
    }

    async function pollNotifications() {
      try {
        const items = await api.get("/v1/notifications?unread_only=true");
        for (const n of items.slice().reverse()) {
          if (state.shownToasts.has(n.id)) continue;
          state.shownToasts.add(n.id);
          showToast(n.type, n.title, n.message, n.duration);
          api.post(`/v1/notifications/${encodeURIComponent(n.id)}/read`).catch(() => {});
        }
      } catch (e) {
        // The next poll retries.
      }
    }

    // Formatting and charts

    function fmtNumber(n) { return Number(n).toLocaleString(); }
    function fmtDate(iso) { return iso ? new Date(iso).toLocaleString() : "never"; }
    function delta(v) {
      const cls = v >= 0 ? "up" : "down";
      return `<span class="delta ${cls}">${v >= 0 ? "+" : ""}${v}%</span>`;
    }
    function esc(s) {
      return String(s == null ? "" : s).replace(/[&<>"']/g, c => ({ "&": "&amp;", "<": "&lt;", ">": "&gt;", '"': "&quot;", "'": "&#39;" }[c]));
    }

    function drawBarChart(canvas, points) {
      if (!canvas || !canvas.getContext) return;
      const ctx = canvas.getContext("2d");
      const w = canvas.width = canvas.clientWidth;
      const h = canvas.height = canvas.clientHeight;
      ctx.clearRect(0, 0, w, h);
      if (!points.length) return;
      const max = Math.max(...points.map(p => Math.max(p.value, p.value2 || 0)), 1);
      const slot = w / points.length;
      const barW = Math.max(4, slot * (points[0].value2 != null ? 0.3 : 0.6));
      ctx.font = "11px sans-serif";
      points.forEach((p, i) => {
        const x = i * slot + slot * 0.2;
        const bh = (h - 20) * p.value / max;
        ctx.fillStyle = "#6366f1";
        ctx.fillRect(x, h - 16 - bh, barW, bh);
        if (p.value2 != null) {
          const bh2 = (h - 20) * p.value2 / max;
          ctx.fillStyle = "#22d3ee";
          ctx.fillRect(x + barW + 2, h - 16 - bh2, barW, bh2);
        }
        ctx.fillStyle = "#94a3b8";
        ctx.fillText(p.name, x, h - 3);
      });
    }

    // Navigation

    async function loadNav() {
      state.nav = await api.get("/v1/navigation");
      const nav = document.getElementById("nav");
      nav.innerHTML = "";
      for (const item of state.nav) {
        const a = document.createElement("a");
        a.textContent = item.label;
        a.dataset.view = item.id;
        a.onclick = () => openView(item.id);
        nav.appendChild(a);
      }
    }

    function openView(view) {
      if (!state.nav.some(i => i.id === view)) view = "dashboard";
      state.view = view;
      document.querySelectorAll("aside nav a").forEach(a => a.classList.toggle("active", a.dataset.view === view));
      document.querySelectorAll(".panel").forEach(p => p.classList.toggle("hidden", p.id !== "panel-" + view));
      const item = state.nav.find(i => i.id === view);
      document.getElementById("page-title").textContent = item ? item.label : "Dashboard";
      const loaders = { dashboard: loadDashboard, users: loadUsers, analytics: loadAnalytics, reports: loadReports, settings: loadSettings };
      (loaders[view] || loadDashboard)().catch(showError);
    }

    // Dashboard

    async function loadStats() {
      const s = await api.get("/v1/dashboard/stats");
      document.getElementById("stats-cards").innerHTML = `
        <div class="card"><div class="label">Total users</div><div class="value">${fmtNumber(s.total_users)}</div>${delta(s.total_users_change)}</div>
        <div class="card"><div class="label">Revenue</div><div class="value">$${fmtNumber(s.revenue)}</div>${delta(s.revenue_change)}</div>
        <div class="card"><div class="label">Active sessions</div><div class="value">${fmtNumber(s.active_sessions)}</div>${delta(s.active_sessions_change)}</div>
        <div class="card"><div class="label">Server load</div><div class="value">${s.server_load}%</div><span class="status-${s.server_load_status}">${s.server_load_status}</span></div>`;
    }

    async function loadDashboard() {
      const [growth, revenue, traffic, activities] = await Promise.all([
        api.get("/v1/dashboard/user-growth"),
        api.get("/v1/dashboard/revenue"),
        api.get("/v1/dashboard/traffic"),
        api.get("/v1/dashboard/activities?limit=10"),
        loadStats(),
      ]);
      drawBarChart(document.getElementById("chart-growth"), growth);
      drawBarChart(document.getElementById("chart-revenue"), revenue);
      drawBarChart(document.getElementById("chart-traffic"), traffic);
      document.getElementById("activity-feed").innerHTML = activities
        .map(a => `<li>${esc(a.description)}${a.user_name ? " &middot; " + esc(a.user_name) : ""} <span class="muted">${fmtDate(a.timestamp)}</span></li>`)
        .join("");
    }

    // Users

    function debounce(fn, ms) {
      let timer = null;
      return (...args) => { clearTimeout(timer); timer = setTimeout(() => fn(...args), ms); };
    }

    async function loadUsers() {
      const u = state.users;
      const params = new URLSearchParams({ page: u.page, limit: u.limit, sort_by: u.sortBy, sort_order: u.sortOrder });
      if (u.search.trim()) params.set("search", u.search.trim());
      if (u.role) params.append("role", u.role);
      if (u.status) params.append("status", u.status);
      const result = await api.get("/v1/users?" + params.toString());
      u.totalPages = result.meta.total_pages;
      u.selected.clear();
      document.getElementById("user-select-all").checked = false;
      updateBulkButton();
      const tbody = document.querySelector("#users-table tbody");
      tbody.innerHTML = result.items.map(user => `
        <tr>
          <td><input type="checkbox" class="user-select" value="${esc(user.id)}" /></td>
          <td>${esc(user.name)}</td>
          <td>${esc(user.email)}</td>
          <td><span class="badge">${esc(user.role)}</span></td>
          <td><span class="badge">${esc(user.status)}</span></td>
          <td>${fmtDate(user.created_at)}</td>
          <td>
            <button class="ghost" data-edit="${esc(user.id)}">Edit</button>
            <button class="danger" data-delete="${esc(user.id)}">Delete</button>
          </td>
        </tr>`).join("") || `<tr><td colspan="7" class="muted">No users found</td></tr>`;
      document.getElementById("user-page-info").textContent =
        `Page ${result.meta.total_pages ? result.meta.page : 0} of ${result.meta.total_pages} (${result.meta.total} users)`;
      document.getElementById("user-prev").disabled = u.page <= 1;
      document.getElementById("user-next").disabled = u.page >= u.totalPages;
      tbody.querySelectorAll(".user-select").forEach(cb => cb.onchange = () => {
        cb.checked ? u.selected.add(cb.value) : u.selected.delete(cb.value);
        updateBulkButton();
      });
      tbody.querySelectorAll("[data-edit]").forEach(b => b.onclick = () => openUserModal(result.items.find(x => x.id === b.dataset.edit)));
      tbody.querySelectorAll("[data-delete]").forEach(b => b.onclick = () => deleteUser(b.dataset.delete));
      document.querySelectorAll("#users-table th.sortable").forEach(th => {
        const arrow = th.dataset.sort === u.sortBy ? (u.sortOrder === "asc" ? " ▲" : " ▼") : "";
        th.textContent = th.textContent.replace(/ [▲▼]$/, "") + arrow;
      });
    }

    function updateBulkButton() {
      const btn = document.getElementById("user-bulk-delete");
      btn.disabled = state.users.selected.size === 0;
      btn.textContent = state.users.selected.size ? `Delete selected (${state.users.selected.size})` : "Delete selected";
    }

    function openUserModal(user) {
      const root = document.getElementById("modal-root");
      root.innerHTML = `
        <div class="modal-backdrop">
          <form class="modal" id="user-form" novalidate>
            <h3>${user ? "Edit user" : "Add user"}</h3>
            <div class="field"><label>Name</label><input name="name" /></div>
            <div class="field"><label>Email</label><input name="email" type="email" /></div>
            <div class="field"><label>Role</label><select name="role"><option>user</option><option>moderator</option><option>admin</option></select></div>
            <div class="field"><label>Status</label><select name="status"><option>active</option><option>inactive</option><option>banned</option><option>pending</option></select></div>
            <p class="error-text" id="user-form-error"></p>
            <button type="submit">Save</button>
            <button type="button" class="ghost" id="user-form-cancel">Cancel</button>
          </form>
        </div>`;
      const form = document.getElementById("user-form");
      if (user) {
        form.name.value = user.name;
        form.email.value = user.email;
        form.role.value = user.role;
        form.status.value = user.status;
      }
      document.getElementById("user-form-cancel").onclick = () => { root.innerHTML = ""; };
      form.onsubmit = async (ev) => {
        ev.preventDefault();
        const body = { name: form.name.value.trim(), email: form.email.value.trim(), role: form.role.value, status: form.status.value };
        const errorEl = document.getElementById("user-form-error");
        if (!body.name) { errorEl.textContent = "Name is required"; return; }
        if (!EMAIL_RE.test(body.email)) { errorEl.textContent = "Invalid email format"; return; }
        try {
          if (user) await api.patch(`/v1/users/${encodeURIComponent(user.id)}`, body);
          else await api.post("/v1/users", body);
          root.innerHTML = "";
          await loadUsers();
          pollNotifications();
        } catch (e) {
          errorEl.textContent = e.message;
        }
      };
    }

    async function deleteUser(id) {
      if (!confirm("Delete this user?")) return;
      try {
        await api.del(`/v1/users/${encodeURIComponent(id)}`);
        await loadUsers();
        pollNotifications();
      } catch (e) { showError(e); }
    }

    async function bulkDeleteUsers() {
      const ids = Array.from(state.users.selected);
      if (!ids.length || !confirm(`Delete ${ids.length} users?`)) return;
      try {
        await api.post("/v1/users/bulk-delete", { ids });
        await loadUsers();
        pollNotifications();
      } catch (e) { showError(e); }
    }

    // Analytics

    async function loadAnalytics() {
      const [overview, pageViews, bounce, devices, browsers, topPages, geo] = await Promise.all([
        api.get("/v1/analytics/overview"),
        api.get("/v1/analytics/page-views"),
        api.get("/v1/analytics/bounce-rate"),
        api.get("/v1/analytics/devices"),
        api.get("/v1/analytics/browsers"),
        api.get("/v1/analytics/top-pages"),
        api.get("/v1/analytics/geography"),
      ]);
      document.getElementById("analytics-cards").innerHTML = `
        <div class="card"><div class="label">Page views</div><div class="value">${fmtNumber(overview.page_views)}</div>${delta(overview.page_views_change)}</div>
        <div class="card"><div class="label">Unique visitors</div><div class="value">${fmtNumber(overview.unique_visitors)}</div>${delta(overview.unique_visitors_change)}</div>
        <div class="card"><div class="label">Avg. session</div><div class="value">${esc(overview.avg_session_duration)}</div></div>
        <div class="card"><div class="label">Bounce rate</div><div class="value">${overview.bounce_rate}%</div>${delta(overview.bounce_rate_change)}</div>`;
      drawBarChart(document.getElementById("chart-page-views"), pageViews);
      drawBarChart(document.getElementById("chart-bounce-rate"), bounce);
      drawBarChart(document.getElementById("chart-devices"), devices);
      drawBarChart(document.getElementById("chart-browsers"), browsers);
      document.querySelector("#top-pages tbody").innerHTML = topPages
        .map(p => `<tr><td>${esc(p.path)}</td><td>${fmtNumber(p.views)}</td><td>${esc(p.avg_time)}</td></tr>`).join("");
      document.querySelector("#geography tbody").innerHTML = geo
        .map(g => `<tr><td>${esc(g.country)}</td><td>${fmtNumber(g.users)}</td></tr>`).join("");
    }

    // Reports

    async function loadReports() {
      const catalog = await api.get("/v1/reports/types");
      const typeSel = document.getElementById("report-type");
      const rangeSel = document.getElementById("report-range");
      if (!typeSel.options.length) {
        typeSel.innerHTML = catalog.types.map(t => `<option value="${t.id}">${esc(t.label)}</option>`).join("");
        rangeSel.innerHTML = catalog.date_ranges.map(r => `<option value="${r.id}">${esc(r.label)}</option>`).join("");
        rangeSel.value = "30d";
      }
      await loadReportHistory();
    }

    async function loadReportHistory() {
      const history = await api.get("/v1/reports");
      document.querySelector("#report-history tbody").innerHTML = history.map(r => `
        <tr>
          <td>${esc(r.title)}</td><td>${esc(r.date_range)}</td><td>${fmtDate(r.generated_at)}</td>
          <td><button class="ghost" data-export="${esc(r.id)}" data-format="csv">CSV</button>
              <button class="ghost" data-export="${esc(r.id)}" data-format="json">JSON</button></td>
        </tr>`).join("") || `<tr><td class="muted">No reports yet</td></tr>`;
      document.querySelectorAll("#report-history [data-export]").forEach(b => b.onclick = () => exportReport(b.dataset.export, b.dataset.format));
    }

    async function generateReport() {
      const body = { type: document.getElementById("report-type").value, date_range: document.getElementById("report-range").value };
      if (body.date_range === "custom") {
        body.start_date = document.getElementById("report-start").value || null;
        body.end_date = document.getElementById("report-end").value || null;
      }
      const btn = document.getElementById("report-generate");
      btn.disabled = true;
      try {
        const report = await api.post("/v1/reports", body);
        const summary = Object.entries(report.summary)
          .map(([k, v]) => `<div class="card"><div class="label">${esc(k.replace(/_/g, " "))}</div><div class="value">${esc(typeof v === "number" ? fmtNumber(v) : v)}</div></div>`).join("");
        const rows = report.rows
          .map(r => `<tr><td>${esc(r.name)}</td><td>${fmtNumber(r.value)}</td><td>${r.change_pct >= 0 ? "+" : ""}${r.change_pct}%</td></tr>`).join("");
        document.getElementById("report-result").innerHTML = `
          <h3>${esc(report.title)} <span class="muted">${report.start_date} to ${report.end_date}</span></h3>
          <div class="cards">${summary}</div>
          <canvas id="chart-report"></canvas>
          <table><thead><tr><th>Period</th><th>Value</th><th>Change</th></tr></thead><tbody>${rows}</tbody></table>`;
        drawBarChart(document.getElementById("chart-report"), report.chart_data);
        await loadReportHistory();
        pollNotifications();
      } catch (e) {
        showError(e);
      } finally {
        btn.disabled = false;
      }
    }

    async function exportReport(id, format) {
      try {
        const res = await api.request("GET", `/v1/reports/${encodeURIComponent(id)}/export?format=${format}`, undefined, { raw: true });
        const blob = await res.blob();
        const match = /filename="([^"]+)"/.exec(res.headers.get("Content-Disposition") || "");
        const a = document.createElement("a");
        a.href = URL.createObjectURL(blob);
        a.download = match ? match[1] : `report.${format}`;
        a.click();
        URL.revokeObjectURL(a.href);
      } catch (e) { showError(e); }
    }

    // Settings

    function isAdmin() { return state.session && state.session.user.role === "admin"; }

    async function loadSettings() {
      const s = await api.get("/v1/settings");
      const general = document.getElementById("tab-general");
      const security = document.getElementById("tab-security");
      for (const form of [general, security]) {
        for (const el of form.elements) {
          if (!el.name || !(el.name in s)) continue;
          if (el.type === "checkbox") el.checked = s[el.name];
          else el.value = s[el.name];
          el.disabled = !isAdmin();
        }
      }
      document.getElementById("site-name").textContent = s.site_name;
      const rl = await api.get("/v1/settings/rate-limit");
      document.getElementById("rate-limit-status").textContent = rl.enabled
        ? `${rl.remaining} of ${rl.limit} requests left in the current ${rl.window_seconds}s window`
        : "Rate limiting is disabled";
      if (isAdmin()) await loadApiKeys();
    }

    async function saveSettings(form, numeric) {
      const body = {};
      for (const el of form.elements) {
        if (!el.name) continue;
        body[el.name] = el.type === "checkbox" ? el.checked : (numeric ? Number(el.value) : el.value);
      }
      try {
        const s = await api.patch("/v1/settings", body);
        document.getElementById("site-name").textContent = s.site_name;
        pollNotifications();
      } catch (e) { showError(e); }
    }

    async function loadApiKeys() {
      const keys = await api.get("/v1/settings/api-keys");
      const tbody = document.querySelector("#api-keys tbody");
      tbody.innerHTML = keys.map(k => `
        <tr>
          <td>${esc(k.name)}</td>
          <td><code data-key="${esc(k.id)}">${esc(k.prefix)}</code></td>
          <td>${k.permissions.map(p => `<span class="badge">${p}</span>`).join(" ")}</td>
          <td>${k.is_active ? "active" : "revoked"}</td>
          <td class="muted">last used ${fmtDate(k.last_used_at)}</td>
          <td>
            <button class="ghost" data-reveal="${esc(k.id)}">Reveal</button>
            ${k.is_active ? `<button class="danger" data-revoke="${esc(k.id)}">Revoke</button>` : ""}
          </td>
        </tr>`).join("");
      tbody.querySelectorAll("[data-reveal]").forEach(b => b.onclick = async () => {
        try {
          const key = await api.get(`/v1/settings/api-keys/${encodeURIComponent(b.dataset.reveal)}/reveal`);
          tbody.querySelector(`[data-key="${CSS.escape(key.id)}"]`).textContent = key.key;
        } catch (e) { showError(e); }
      });
      tbody.querySelectorAll("[data-revoke]").forEach(b => b.onclick = async () => {
        if (!confirm("Revoke this key?")) return;
        try {
          await api.post(`/v1/settings/api-keys/${encodeURIComponent(b.dataset.revoke)}/revoke`);
          await loadApiKeys();
          pollNotifications();
        } catch (e) { showError(e); }
      });
    }

    async function createApiKey() {
      const name = document.getElementById("key-name").value.trim();
      const permissions = Array.from(document.querySelectorAll(".key-perm:checked")).map(c => c.value);
      if (!name) { showToast("warning", "Warning", "Key name is required", 7000); return; }
      try {
        const key = await api.post("/v1/settings/api-keys", { name, permissions });
        document.getElementById("key-name").value = "";
        await loadApiKeys();
        const cell = document.querySelector(`[data-key="${CSS.escape(key.id)}"]`);
        if (cell) cell.textContent = key.key;
        pollNotifications();
      } catch (e) { showError(e); }
    }

    // Bootstrapping

    async function enterApp() {
      show("app-view");
      document.getElementById("current-user").textContent = `${state.session.user.name} (${state.session.user.role})`;
      await loadNav();
      openView(state.view);
      clearInterval(state.statsTimer);
      state.statsTimer = setInterval(() => {
        if (state.view === "dashboard") loadStats().catch(() => {});
      }, STATS_POLL_MS);
      clearInterval(state.notifyTimer);
      state.notifyTimer = setInterval(pollNotifications, NOTIFY_POLL_MS);
      pollNotifications();
    }

    document.getElementById("login-form").onsubmit = async (ev) => {
      ev.preventDefault();
      const email = document.getElementById("login-email").value.trim();
      const password = document.getElementById("login-password").value;
      const errorEl = document.getElementById("login-error");
      if (!email) { errorEl.textContent = "Email is required"; return; }
      if (!EMAIL_RE.test(email)) { errorEl.textContent = "Invalid email format"; return; }
      if (!password) { errorEl.textContent = "Password is required"; return; }
      if (password.length < 6) { errorEl.textContent = "Password must be at least 6 characters"; return; }
      errorEl.textContent = "";
      const btn = document.getElementById("login-submit");
      btn.disabled = true;
      try {
        const session = await api.request("POST", "/v1/auth/login",
          { email, password, remember_me: document.getElementById("login-remember").checked }, { retry: false });
        saveSession(session);
        await enterApp();
      } catch (e) {
        errorEl.textContent = e.message;
      } finally {
        btn.disabled = false;
      }
    };

    document.getElementById("logout-btn").onclick = async () => {
      try { await api.post("/v1/auth/logout"); } catch (e) { /* session is dropped locally either way */ }
      endSession();
    };

    const onSearch = debounce(() => { state.users.page = 1; loadUsers().catch(showError); }, SEARCH_DEBOUNCE_MS);
    document.getElementById("user-search").oninput = (ev) => { state.users.search = ev.target.value; onSearch(); };
    document.getElementById("user-role").onchange = (ev) => { state.users.role = ev.target.value; state.users.page = 1; loadUsers().catch(showError); };
    document.getElementById("user-status").onchange = (ev) => { state.users.status = ev.target.value; state.users.page = 1; loadUsers().catch(showError); };
    document.getElementById("user-prev").onclick = () => { state.users.page -= 1; loadUsers().catch(showError); };
    document.getElementById("user-next").onclick = () => { state.users.page += 1; loadUsers().catch(showError); };
    document.getElementById("user-add").onclick = () => openUserModal(null);
    document.getElementById("user-bulk-delete").onclick = bulkDeleteUsers;
    document.getElementById("user-select-all").onchange = (ev) => {
      document.querySelectorAll(".user-select").forEach(cb => {
        cb.checked = ev.target.checked;
        ev.target.checked ? state.users.selected.add(cb.value) : state.users.selected.delete(cb.value);
      });
      updateBulkButton();
    };
    document.querySelectorAll("#users-table th.sortable").forEach(th => th.onclick = () => {
      const u = state.users;
      if (u.sortBy === th.dataset.sort) u.sortOrder = u.sortOrder === "asc" ? "desc" : "asc";
      else { u.sortBy = th.dataset.sort; u.sortOrder = "asc"; }
      loadUsers().catch(showError);
    });

    document.getElementById("report-range").onchange = (ev) => {
      const custom = ev.target.value === "custom";
      document.getElementById("report-start").classList.toggle("hidden", !custom);
      document.getElementById("report-end").classList.toggle("hidden", !custom);
    };
    document.getElementById("report-generate").onclick = generateReport;

    document.querySelectorAll(".tabs button").forEach(b => b.onclick = () => {
      document.querySelectorAll(".tabs button").forEach(x => {
        x.classList.toggle("active", x === b);
        x.classList.toggle("ghost", x !== b);
      });
      document.querySelectorAll(".settings-tab").forEach(t => t.classList.toggle("hidden", t.id !== "tab-" + b.dataset.tab));
    });
    document.getElementById("tab-general").onsubmit = (ev) => { ev.preventDefault(); saveSettings(ev.target, false); };
    document.getElementById("tab-security").onsubmit = (ev) => { ev.preventDefault(); saveSettings(ev.target, true); };
    document.getElementById("key-create").onclick = createApiKey;

    (async () => {
      const stored = loadSession();
      if (!stored) { show("login-view"); return; }
      state.session = stored;
      if (stored.expires_at - REFRESH_MARGIN_S <= Date.now() / 1000 && !(await refreshSession())) return;
      scheduleRefresh();
      try { await enterApp(); } catch (e) { showError(e); }
    })();
  </script>
</body>
</html>
"""
