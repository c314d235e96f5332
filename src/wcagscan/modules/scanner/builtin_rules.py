"""Minimal in-page rule set used when no rule engine build can be fetched.

The function is sent with ``page.evaluate`` rather than as a script tag, so a
page Content-Security-Policy that forbids inline scripts does not block it. It
installs ``window.axe.run`` with three structural checks and reports
them in the same shape as axe-core, so downstream processing does not care
which engine produced the findings.
"""

BUILTIN_ENGINE_VERSION = "wcagscan-builtin"

BUILTIN_RULE_IDS = ("image-alt", "link-name", "label")

BUILTIN_RULES_FUNCTION = r"""
() => {
  if (window.axe && window.axe.__builtin) {
    return;
  }

  const cssPath = (el) => {
    const parts = [];
    let node = el;
    while (node && node.nodeType === 1 && node !== document.documentElement) {
      if (node.id) {
        parts.unshift('#' + CSS.escape(node.id));
        break;
      }
      let part = node.tagName.toLowerCase();
      const parent = node.parentElement;
      if (parent) {
        const siblings = Array.from(parent.children).filter((s) => s.tagName === node.tagName);
        if (siblings.length > 1) {
          part += ':nth-of-type(' + (siblings.indexOf(node) + 1) + ')';
        }
      }
      parts.unshift(part);
      node = parent;
    }
    return parts.join(' > ');
  };

  const isHidden = (el) => el.closest('[aria-hidden="true"]') !== null || el.hidden;

  const textOf = (value) => (value || '').trim();

  const labelledByText = (el) => {
    const ids = textOf(el.getAttribute('aria-labelledby')).split(/\s+/).filter(Boolean);
    return ids
      .map((id) => document.getElementById(id))
      .filter(Boolean)
      .map((ref) => textOf(ref.textContent))
      .join(' ')
      .trim();
  };

  const linkText = (el) =>
    textOf(el.getAttribute('aria-label')) ||
    labelledByText(el) ||
    textOf(el.textContent) ||
    textOf(el.getAttribute('title')) ||
    Array.from(el.querySelectorAll('img[alt]'))
      .map((img) => textOf(img.getAttribute('alt')))
      .join('');

  const hasLabel = (el) => {
    if (textOf(el.getAttribute('aria-label')) || labelledByText(el)) return true;
    if (textOf(el.getAttribute('title'))) return true;
    if (el.labels && Array.from(el.labels).some((label) => textOf(label.textContent))) return true;
    return false;
  };

  const IGNORED_INPUTS = ['hidden', 'submit', 'button', 'reset', 'image'];

  const rules = [
    {
      id: 'image-alt',
      impact: 'critical',
      tags: ['cat.text-alternatives', 'wcag2a', 'wcag111', 'section508'],
      description: 'Ensures <img> elements have alternate text or a role of none or presentation',
      help: 'Images must have alternate text',
      select: () =>
        Array.from(document.querySelectorAll('img')).filter(
          (img) =>
            !img.hasAttribute('alt') &&
            !['none', 'presentation'].includes(textOf(img.getAttribute('role'))) &&
            !textOf(img.getAttribute('aria-label')) &&
            !labelledByText(img) &&
            !textOf(img.getAttribute('title')) &&
            !isHidden(img)
        ),
    },
    {
      id: 'link-name',
      impact: 'serious',
      tags: ['cat.name-role-value', 'wcag2a', 'wcag244', 'wcag412', 'section508'],
      description: 'Ensures links have discernible text',
      help: 'Links must have discernible text',
      select: () =>
        Array.from(document.querySelectorAll('a[href]')).filter(
          (link) => !isHidden(link) && !linkText(link)
        ),
    },
    {
      id: 'label',
      impact: 'critical',
      tags: ['cat.forms', 'wcag2a', 'wcag412', 'section508'],
      description: 'Ensures every form element has a label',
      help: 'Form elements must have labels',
      select: () =>
        Array.from(document.querySelectorAll('input, select, textarea')).filter((field) => {
          const type = textOf(field.getAttribute('type')).toLowerCase();
          return !IGNORED_INPUTS.includes(type) && !isHidden(field) && !hasLabel(field);
        }),
    },
  ];

  const selected = (rule, options) => {
    const runOnly = options && options.runOnly;
    if (!runOnly || !Array.isArray(runOnly.values) || runOnly.values.length === 0) {
      return true;
    }
    return rule.tags.some((tag) => runOnly.values.includes(tag));
  };

  window.axe = {
    version: 'wcagscan-builtin',
    __builtin: true,
    run: async (options) => {
      const results = { violations: [], passes: [], incomplete: [], inapplicable: [] };
      for (const rule of rules) {
        if (!selected(rule, options)) {
          results.inapplicable.push({ id: rule.id, tags: rule.tags, nodes: [] });
          continue;
        }
        const matches = rule.select();
        const record = {
          id: rule.id,
          impact: rule.impact,
          tags: rule.tags,
          description: rule.description,
          help: rule.help,
          helpUrl: '',
        };
        if (matches.length > 0) {
          record.nodes = matches.map((el) => ({
            html: el.outerHTML.slice(0, 500),
            target: [cssPath(el)],
            impact: rule.impact,
          }));
          results.violations.push(record);
        } else {
          record.impact = null;
          record.nodes = [];
          results.passes.push(record);
        }
      }
      return results;
    },
  };
}
"""
