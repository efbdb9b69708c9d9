CONCEPT_MAP_HTML = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1">
    <title>__TITLE__</title>
    <style>
        * { margin: 0; padding: 0; box-sizing: border-box; }
        body { font-family: -apple-system, 'Segoe UI', Helvetica, sans-serif; background: #f4f6f7; color: #1b2631; }
        header {
            display: flex; align-items: center; justify-content: space-between;
            padding: 12px 20px; background: #ffffff; border-bottom: 1px solid #d5dbdb;
        }
        header h1 { font-size: 18px; font-weight: 600; color: #1a5276; }
        .buttons { display: flex; gap: 8px; }
        .btn {
            padding: 6px 12px; background: #ffffff; border: 1px solid #aab7b8;
            border-radius: 4px; color: #2c3e50; cursor: pointer; font-size: 12px;
        }
        .btn:hover { border-color: #1a5276; color: #1a5276; }
        main { display: flex; gap: 16px; padding: 16px; }
        #stage {
            position: relative; flex: 1; min-width: 0;
            background: #ffffff; border: 1px solid #d5dbdb; border-radius: 8px; overflow: hidden;
        }
        #canvas { display: block; width: 100%; height: auto; cursor: grab; touch-action: none; user-select: none; }
        #canvas.panning { cursor: grabbing; }
        .node { cursor: pointer; }
        .node circle.body { stroke: #ffffff; stroke-width: 2; }
        .node text { pointer-events: none; text-anchor: middle; dominant-baseline: central; font-size: 11px; fill: #ffffff; font-weight: 600; }
        .node.level-core text { font-size: 13px; }
        .node.level-detail text { fill: #1b2631; font-weight: 500; }
        .node.selected circle.body { stroke: #f1c40f; stroke-width: 4; }
        .toggle { cursor: pointer; }
        .toggle circle { fill: #ffffff; stroke: #2c3e50; stroke-width: 1.5; }
        .toggle text { fill: #2c3e50 !important; font-size: 13px !important; font-weight: 700; }
        .edge-label { font-size: 10px; text-anchor: middle; pointer-events: none; paint-order: stroke; stroke: #ffffff; stroke-width: 3px; }
        #popup {
            position: absolute; max-width: 280px; padding: 12px 14px;
            background: #ffffff; border: 1px solid #aab7b8; border-radius: 6px;
            box-shadow: 0 4px 14px rgba(0,0,0,0.15); font-size: 12px; z-index: 10;
        }
        #popup.hidden { display: none; }
        #popup h3 { font-size: 14px; margin-bottom: 4px; color: #1a5276; }
        #popup .level { font-size: 10px; text-transform: uppercase; letter-spacing: 1px; color: #85929e; margin-bottom: 6px; }
        #popup p { margin-bottom: 6px; line-height: 1.4; }
        #popup a { color: #2874a6; }
        #popup .inferred { color: #85929e; font-style: italic; }
        aside {
            width: 260px; flex-shrink: 0; padding: 14px 16px;
            background: #ffffff; border: 1px solid #d5dbdb; border-radius: 8px; font-size: 12px;
        }
        aside h2 { font-size: 11px; text-transform: uppercase; letter-spacing: 1.5px; color: #85929e; margin: 4px 0 10px; }
        .slider { margin-bottom: 12px; }
        .slider label { display: flex; justify-content: space-between; margin-bottom: 4px; }
        .slider .value { font-variant-numeric: tabular-nums; color: #1a5276; font-weight: 600; }
        .slider input { width: 100%; }
        .legend-item { display: flex; align-items: center; gap: 8px; padding: 3px 0; }
        .legend-dot { width: 12px; height: 12px; border-radius: 50%; }
        .legend-line { width: 22px; height: 0; border-top-width: 3px; }
        #stats { margin-top: 14px; color: #85929e; line-height: 1.6; }
    </style>
</head>
<body>
    <header>
        <h1>__TITLE__</h1>
        <div class="buttons">
            <button class="btn" id="expand-all">Expand all</button>
            <button class="btn" id="collapse-all">Collapse all</button>
            <button class="btn" id="reset-view">Reset view</button>
        </div>
    </header>
    <main>
        <div id="stage">
            <svg id="canvas" xmlns="http://www.w3.org/2000/svg">
                <defs id="markers"></defs>
                <g id="viewport">
                    <g id="edge-layer"></g>
                    <g id="node-layer"></g>
                </g>
            </svg>
            <div id="popup" class="hidden"></div>
        </div>
        <aside>
            <h2>Physics</h2>
            <div id="sliders"></div>
            <h2>Legend</h2>
            <div id="legend"></div>
            <div id="stats"></div>
        </aside>
    </main>

    <script type="application/json" id="graph-data">__GRAPH_DATA__</script>
    <script>
    (function () {
        'use strict';

        const data = JSON.parse(document.getElementById('graph-data').textContent);
        const P = data.params;
        const C = data.constants;
        const SVG_NS = 'http://www.w3.org/2000/svg';

        const svg = document.getElementById('canvas');
        const viewport = document.getElementById('viewport');
        const edgeLayer = document.getElementById('edge-layer');
        const nodeLayer = document.getElementById('node-layer');
        const popup = document.getElementById('popup');
        const stage = document.getElementById('stage');
        svg.setAttribute('viewBox', '0 0 ' + P.width + ' ' + P.height);

        // ---- Presentation state ----
        const nodes = new Map();
        data.nodes.forEach(n => {
            n.vx = 0; n.vy = 0;
            n.pinned = n.level === 'core';
            nodes.set(n.id, n);
        });
        const edges = data.edges.filter(e => nodes.has(e.source) && nodes.has(e.target));
        const expanded = {};
        data.nodes.forEach(n => { if (n.level === 'major') expanded[n.id] = false; });

        function childrenOf(majorId) {
            return data.nodes.filter(n => n.level === 'detail' && n.parent === majorId);
        }
        function isVisible(n) {
            if (!n) return false;
            if (n.level !== 'detail') return true;
            return !!expanded[n.parent];
        }
        function visibleNodes() { return data.nodes.filter(isVisible); }
        function visibleEdges() {
            return edges.filter(e => isVisible(nodes.get(e.source)) && isVisible(nodes.get(e.target)));
        }

        // ---- Physics (same step as conceptmap.render.layout) ----
        function clamp(n) {
            const lowX = P.padding, highX = P.width - P.padding;
            const lowY = P.padding, highY = P.height - P.padding;
            if (n.x < lowX || n.x > highX) { n.x = Math.min(Math.max(n.x, lowX), highX); n.vx = 0; }
            if (n.y < lowY || n.y > highY) { n.y = Math.min(Math.max(n.y, lowY), highY); n.vy = 0; }
        }

        function seedNearParent(detail) {
            const core = data.nodes[0];
            const parent = nodes.get(detail.parent) || core;
            const dx = parent.x - core.x, dy = parent.y - core.y;
            const dist = Math.hypot(dx, dy) || 1;
            const offset = parent.radius + P.node_margin + detail.radius;
            const jitter = () => (Math.random() * 2 - 1) * P.detail_jitter;
            detail.x = parent.x + dx / dist * offset + jitter();
            detail.y = parent.y + dy / dist * offset + jitter();
            detail.vx = 0; detail.vy = 0;
            clamp(detail);
        }

        let temperature = 1;
        let remaining = 0;
        let generation = 0;
        let frameId = null;

        function step() {
            const vis = visibleNodes();
            const forces = new Map(vis.map(n => [n.id, [0, 0]]));

            for (let i = 0; i < vis.length; i++) {
                const a = vis[i];
                for (let j = i + 1; j < vis.length; j++) {
                    const b = vis[j];
                    let dx = b.x - a.x, dy = b.y - a.y;
                    let dist = Math.hypot(dx, dy);
                    if (dist < C.min_distance) {
                        const angle = Math.random() * 2 * Math.PI;
                        dx = Math.cos(angle) * C.min_distance;
                        dy = Math.sin(angle) * C.min_distance;
                        dist = C.min_distance;
                    }
                    let force = P.repulsion / (dist * dist);
                    const minGap = a.radius + b.radius + P.node_margin;
                    if (dist < minGap) force += P.overlap_strength * (minGap - dist);
                    const fx = force * dx / dist, fy = force * dy / dist;
                    forces.get(a.id)[0] -= fx; forces.get(a.id)[1] -= fy;
                    forces.get(b.id)[0] += fx; forces.get(b.id)[1] += fy;
                }
            }

            visibleEdges().forEach(e => {
                // A detail hangs off its major, not the core
                const b = nodes.get(e.target);
                const a = nodes.get((e.implicit && b.parent) || e.source);
                const dx = b.x - a.x, dy = b.y - a.y;
                const dist = Math.hypot(dx, dy) || C.min_distance;
                const rest = P.link_distance * (e.implicit ? P.hierarchy_rest_factor : 1);
                const force = C.spring_strength * (dist - rest);
                const fx = force * dx / dist, fy = force * dy / dist;
                forces.get(a.id)[0] += fx; forces.get(a.id)[1] += fy;
                forces.get(b.id)[0] -= fx; forces.get(b.id)[1] -= fy;
            });

            const cx = P.width / 2, cy = P.height / 2;
            vis.forEach(n => {
                if (n.pinned) { n.vx = 0; n.vy = 0; return; }
                const f = forces.get(n.id);
                const fx = f[0] + (cx - n.x) * P.gravity;
                const fy = f[1] + (cy - n.y) * P.gravity;
                n.vx = (n.vx + fx * temperature) * P.damping;
                n.vy = (n.vy + fy * temperature) * P.damping;
                const speed = Math.hypot(n.vx, n.vy);
                if (speed > C.max_speed) { n.vx *= C.max_speed / speed; n.vy *= C.max_speed / speed; }
                n.x += n.vx;
                n.y += n.vy;
                clamp(n);
            });
        }

        // Re-settling after an expand, collapse or drop
        const shortBurst = () => Math.max(1, Math.floor(P.iterations / 3));

        // Starting a run cancels the pending frame of any earlier run
        function restart(iterations) {
            if (frameId !== null) cancelAnimationFrame(frameId);
            generation += 1;
            const gen = generation;
            remaining = iterations === undefined ? P.iterations : iterations;
            temperature = 1;

            function tick() {
                if (gen !== generation || remaining <= 0) { frameId = null; return; }
                step();
                remaining -= 1;
                temperature *= P.cooling;
                updatePositions();
                frameId = remaining > 0 ? requestAnimationFrame(tick) : null;
            }
            frameId = requestAnimationFrame(tick);
        }

        // ---- Drawing ----
        const view = { scale: 1, tx: 0, ty: 0 };
        const edgeEls = [];
        const nodeEls = new Map();
        let selectedId = null;

        function el(tag, attrs) {
            const element = document.createElementNS(SVG_NS, tag);
            Object.entries(attrs || {}).forEach(([k, v]) => element.setAttribute(k, v));
            return element;
        }

        function markerId(color) { return 'arrow-' + color.replace(/[^a-zA-Z0-9]/g, ''); }

        function buildMarkers() {
            const defs = document.getElementById('markers');
            const colors = new Set(edges.map(e => e.color));
            colors.forEach(color => {
                const marker = el('marker', {
                    id: markerId(color), viewBox: '0 0 10 10', refX: 9, refY: 5,
                    markerWidth: 7, markerHeight: 7, orient: 'auto-start-reverse',
                });
                marker.appendChild(el('path', { d: 'M 0 0 L 10 5 L 0 10 z', fill: color }));
                defs.appendChild(marker);
            });
        }

        function draw() {
            edgeLayer.replaceChildren();
            nodeLayer.replaceChildren();
            edgeEls.length = 0;
            nodeEls.clear();

            visibleEdges().forEach(e => {
                const line = el('line', {
                    stroke: e.color, 'stroke-width': e.width, 'stroke-opacity': e.implicit ? 0.6 : 0.9,
                });
                if (e.dash) line.setAttribute('stroke-dasharray', e.dash);
                if (!e.implicit) {
                    line.setAttribute('marker-end', 'url(#' + markerId(e.color) + ')');
                    if (e.bidirectional) line.setAttribute('marker-start', 'url(#' + markerId(e.color) + ')');
                }
                const title = el('title');
                title.textContent = [e.type, e.description, e.evidence].filter(Boolean).join(' | ');
                line.appendChild(title);
                edgeLayer.appendChild(line);

                let label = null;
                if (e.label) {
                    label = el('text', { class: 'edge-label', fill: e.color });
                    label.textContent = e.label;
                    edgeLayer.appendChild(label);
                }
                edgeEls.push({ edge: e, line: line, label: label });
            });

            visibleNodes().forEach(n => {
                const g = el('g', { class: 'node level-' + n.level + (n.id === selectedId ? ' selected' : '') });
                const body = el('circle', { class: 'body', r: n.radius, fill: n.color });
                const title = el('title');
                title.textContent = n.label;
                body.appendChild(title);
                g.appendChild(body);
                const text = el('text');
                text.textContent = n.short_label;
                g.appendChild(text);

                if (n.level === 'major' && childrenOf(n.id).length) {
                    const offset = n.radius * 0.72;
                    const toggle = el('g', { class: 'toggle', transform: 'translate(' + offset + ',' + (-offset) + ')' });
                    toggle.appendChild(el('circle', { r: 9 }));
                    const sign = el('text');
                    sign.textContent = expanded[n.id] ? '−' : '+';
                    toggle.appendChild(sign);
                    toggle.addEventListener('pointerdown', ev => ev.stopPropagation());
                    toggle.addEventListener('click', ev => { ev.stopPropagation(); toggleMajor(n.id); });
                    g.appendChild(toggle);
                }

                g.addEventListener('pointerdown', ev => startDrag(ev, n));
                nodeLayer.appendChild(g);
                nodeEls.set(n.id, g);
            });

            updatePositions();
            updateStats();
        }

        function updatePositions() {
            edgeEls.forEach(item => {
                const a = nodes.get(item.edge.source), b = nodes.get(item.edge.target);
                const dx = b.x - a.x, dy = b.y - a.y;
                const dist = Math.hypot(dx, dy) || 1;
                const ux = dx / dist, uy = dy / dist;
                item.line.setAttribute('x1', a.x + ux * a.radius);
                item.line.setAttribute('y1', a.y + uy * a.radius);
                item.line.setAttribute('x2', b.x - ux * b.radius);
                item.line.setAttribute('y2', b.y - uy * b.radius);
                if (item.label) {
                    item.label.setAttribute('x', (a.x + b.x) / 2);
                    item.label.setAttribute('y', (a.y + b.y) / 2 - 4);
                }
            });
            nodeEls.forEach((g, id) => {
                const n = nodes.get(id);
                g.setAttribute('transform', 'translate(' + n.x + ',' + n.y + ')');
            });
        }

        function applyView() {
            viewport.setAttribute('transform', 'translate(' + view.tx + ',' + view.ty + ') scale(' + view.scale + ')');
        }

        function updateStats() {
            const shown = visibleNodes().length;
            const stats = document.getElementById('stats');
            stats.textContent = shown + ' of ' + data.nodes.length + ' concepts shown, ' +
                visibleEdges().filter(e => !e.implicit).length + ' relationships';
        }

        // ---- Expand / collapse ----
        function setExpanded(majorId, value) {
            if (value && !expanded[majorId]) childrenOf(majorId).forEach(seedNearParent);
            expanded[majorId] = value;
        }
        function toggleMajor(majorId) {
            setExpanded(majorId, !expanded[majorId]);
            hidePopup();
            draw();
            restart(shortBurst());
        }
        document.getElementById('expand-all').addEventListener('click', () => {
            Object.keys(expanded).forEach(id => setExpanded(id, true));
            draw();
            restart(shortBurst());
        });
        document.getElementById('collapse-all').addEventListener('click', () => {
            Object.keys(expanded).forEach(id => setExpanded(id, false));
            hidePopup();
            draw();
            restart(shortBurst());
        });
        document.getElementById('reset-view').addEventListener('click', () => {
            view.scale = 1; view.tx = 0; view.ty = 0;
            applyView();
            restart();
        });

        // ---- Popup ----
        function showPopup(n, clientX, clientY) {
            selectedId = n.id;
            popup.replaceChildren();
            const h = document.createElement('h3');
            h.textContent = n.label;
            popup.appendChild(h);
            const level = document.createElement('div');
            level.className = 'level';
            level.textContent = n.level + (n.level === 'core' ? '' : ' concept, ' + n.occurrences + ' occurrences');
            popup.appendChild(level);
            if (n.description) {
                const p = document.createElement('p');
                p.textContent = n.description;
                popup.appendChild(p);
            }
            if (n.link) {
                const a = document.createElement('a');
                a.href = n.link;
                a.target = '_blank';
                a.rel = 'noopener noreferrer';
                a.textContent = 'Open source note';
                popup.appendChild(a);
            } else {
                const span = document.createElement('span');
                span.className = 'inferred';
                span.textContent = 'inferred concept, no direct source';
                popup.appendChild(span);
            }
            const box = stage.getBoundingClientRect();
            popup.style.left = Math.min(clientX - box.left + 12, box.width - 290) + 'px';
            popup.style.top = Math.max(clientY - box.top + 12, 8) + 'px';
            popup.classList.remove('hidden');
            nodeEls.forEach((g, id) => g.classList.toggle('selected', id === selectedId));
        }
        function hidePopup() {
            selectedId = null;
            popup.classList.add('hidden');
            nodeEls.forEach(g => g.classList.remove('selected'));
        }

        // ---- Pointer interaction ----
        let drag = null;
        let pan = null;

        function toCanvas(clientX, clientY) {
            const pt = svg.createSVGPoint();
            pt.x = clientX; pt.y = clientY;
            return pt.matrixTransform(viewport.getScreenCTM().inverse());
        }
        function toSvg(clientX, clientY) {
            const pt = svg.createSVGPoint();
            pt.x = clientX; pt.y = clientY;
            return pt.matrixTransform(svg.getScreenCTM().inverse());
        }

        function startDrag(ev, n) {
            ev.stopPropagation();
            drag = { node: n, startX: ev.clientX, startY: ev.clientY, moved: false };
        }

        svg.addEventListener('pointerdown', ev => {
            const p = toSvg(ev.clientX, ev.clientY);
            pan = { x: p.x, y: p.y, tx: view.tx, ty: view.ty, moved: false };
            svg.classList.add('panning');
        });

        window.addEventListener('pointermove', ev => {
            if (drag) {
                if (!drag.moved && Math.hypot(ev.clientX - drag.startX, ev.clientY - drag.startY) < 3) return;
                drag.moved = true;
                const n = drag.node;
                if (n.level === 'core') return;
                const p = toCanvas(ev.clientX, ev.clientY);
                n.x = p.x; n.y = p.y; n.vx = 0; n.vy = 0;
                n.pinned = true;
                clamp(n);
                updatePositions();
            } else if (pan) {
                const p = toSvg(ev.clientX, ev.clientY);
                view.tx = pan.tx + (p.x - pan.x);
                view.ty = pan.ty + (p.y - pan.y);
                pan.moved = pan.moved || Math.abs(p.x - pan.x) + Math.abs(p.y - pan.y) > 2;
                applyView();
            }
        });

        window.addEventListener('pointerup', ev => {
            if (drag) {
                const n = drag.node;
                if (drag.moved) {
                    if (n.level !== 'core') n.pinned = false;
                    restart(shortBurst());
                } else {
                    showPopup(n, ev.clientX, ev.clientY);
                }
                drag = null;
            } else if (pan) {
                if (!pan.moved) hidePopup();
            }
            pan = null;
            svg.classList.remove('panning');
        });

        svg.addEventListener('wheel', ev => {
            ev.preventDefault();
            const p = toSvg(ev.clientX, ev.clientY);
            const next = Math.min(Math.max(view.scale * Math.exp(-ev.deltaY * 0.0015), 0.2), 5);
            view.tx = p.x - (p.x - view.tx) * (next / view.scale);
            view.ty = p.y - (p.y - view.ty) * (next / view.scale);
            view.scale = next;
            applyView();
        }, { passive: false });

        // ---- Parameter sliders ----
        const SLIDER_LABELS = {
            repulsion: 'Repulsion',
            link_distance: 'Link distance',
            gravity: 'Gravity',
            damping: 'Damping',
            overlap_strength: 'Overlap avoidance',
        };
        function formatValue(v, stepSize) {
            const decimals = stepSize < 1 ? Math.min(3, String(stepSize).split('.')[1].length) : 0;
            return v.toFixed(decimals);
        }
        Object.entries(data.bounds).forEach(([key, range]) => {
            const wrap = document.createElement('div');
            wrap.className = 'slider';
            const label = document.createElement('label');
            const name = document.createElement('span');
            name.textContent = SLIDER_LABELS[key] || key;
            const value = document.createElement('span');
            value.className = 'value';
            label.appendChild(name);
            label.appendChild(value);
            const input = document.createElement('input');
            input.type = 'range';
            input.min = range[0]; input.max = range[1]; input.step = range[2];
            input.value = P[key];
            value.textContent = formatValue(P[key], range[2]);
            input.addEventListener('input', () => {
                P[key] = parseFloat(input.value);
                value.textContent = formatValue(P[key], range[2]);
                restart();
            });
            wrap.appendChild(label);
            wrap.appendChild(input);
            document.getElementById('sliders').appendChild(wrap);
        });

        // ---- Legend ----
        const legend = document.getElementById('legend');
        data.legend.nodes.forEach(item => {
            const row = document.createElement('div');
            row.className = 'legend-item';
            const dot = document.createElement('span');
            dot.className = 'legend-dot';
            dot.style.background = item.color;
            const text = document.createElement('span');
            text.textContent = item.label;
            row.appendChild(dot);
            row.appendChild(text);
            legend.appendChild(row);
        });
        data.legend.edges.forEach(item => {
            const row = document.createElement('div');
            row.className = 'legend-item';
            const line = document.createElement('span');
            line.className = 'legend-line';
            line.style.borderTopStyle = item.style;
            line.style.borderTopColor = item.color;
            const text = document.createElement('span');
            text.textContent = item.label;
            row.appendChild(line);
            row.appendChild(text);
            legend.appendChild(row);
        });

        buildMarkers();
        applyView();
        draw();
    })();
    </script>
</body>
</html>
"""
