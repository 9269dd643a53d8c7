import anywidget
import ipywidgets as widgets
import traitlets

from .controller import create_controller
from .errors import InvalidBoundsError
from .options import SliderOptions


class TickStrip(anywidget.AnyWidget):
    """
    Frontend-only tick ruler drawn under the range slider.

    Receives the controller's tick descriptors as plain dicts
    (``position`` in percent, ``label``, ``major``, optional ``major_label``)
    and lays them out absolutely in the browser.
    """

    ticks = traitlets.List(trait=traitlets.Dict()).tag(sync=True)

    _esm = r"""
    export default {
      render({ model, el }) {
        el.classList.add("trs-ticks");

        function draw() {
          el.replaceChildren();
          const ticks = model.get("ticks") || [];
          for (const tick of ticks) {
            const pos = Number(tick.position);
            if (!Number.isFinite(pos)) continue;

            const mark = document.createElement("div");
            mark.className = tick.major ? "trs-tick trs-major" : "trs-tick";
            mark.style.left = `${pos}%`;

            const text = document.createElement("span");
            text.textContent = tick.major && tick.major_label ? tick.major_label : tick.label;
            mark.appendChild(text);
            el.appendChild(mark);
          }
        }

        model.on("change:ticks", draw);
        draw();
        return () => model.off("change:ticks", draw);
      }
    }
    """

    _css = r"""
    .trs-ticks { position: relative; height: 26px; margin: 0 8px; }
    .trs-tick {
      position: absolute; top: 0; width: 1px; height: 6px;
      background: var(--jp-ui-font-color3, #aaa);
    }
    .trs-tick span {
      position: absolute; top: 8px; transform: translateX(-50%);
      font-size: 10px; white-space: nowrap;
      color: var(--jp-ui-font-color2, #666);
    }
    .trs-major { height: 10px; background: var(--jp-ui-font-color1, #333); }
    .trs-major span { font-weight: 600; color: var(--jp-ui-font-color1, #333); }
    """


class TimeRangeSlider(widgets.VBox):
    """
    A dual-thumb date-range slider with:
      - start/end labels formatted at the current granularity,
      - a granularity badge that follows the selection width (adaptive mode)
        or the zoom level (snap mode),
      - zoom-in / zoom-out / reset buttons backed by a zoom history,
      - a tick ruler with major (parent unit) and minor ticks.

    Design notes
    ------------
    - All state lives in the range controller; this widget only forwards raw
      events and renders the controller's display fields.
    - The slider's built-in readout is disabled: positions are indices into
      the view extent, not dates.
    - ``value`` mirrors the selected range in the configured output format.
      Assigning it writes an external range (clamped or extent-grown by the
      controller) without emitting a change back.
    """

    value = traitlets.Any(None)
    granularity = traitlets.Unicode("")
    disabled = traitlets.Bool(False)

    def __init__(
        self,
        min_date,
        max_date,
        value=None,
        mode="adaptive",
        output_format="date",
        initial_granularity=None,
        disabled=False,
        max_ticks=7,
        description="",
        **kwargs,
    ):
        options = SliderOptions(
            min_date=min_date,
            max_date=max_date,
            disabled=disabled,
            output_format=output_format,
            initial_granularity=initial_granularity,
            mode=mode,
            max_ticks=max_ticks,
        )
        if not options.has_valid_bounds:
            raise InvalidBoundsError(options.min_date, options.max_date)

        self.options = options
        self.controller = create_controller(options)

        # Internal guard to prevent circular updates (slider -> controller -> slider -> ...)
        self._syncing = False

        # --- Main controls ----------------------------------------------------
        self.slider = widgets.IntRangeSlider(
            min=0,
            max=self.controller.slider_max,
            value=tuple(self.controller.slider_values),
            step=1,
            description="",
            continuous_update=True,
            readout=False,  # positions are meaningless to users; labels show dates
            layout=widgets.Layout(width="100%"),
        )

        self.description_label = widgets.HTMLMath(
            value=description,
            layout=widgets.Layout(width="auto"),
        )
        self.start_label = widgets.HTML(layout=widgets.Layout(width="auto"))
        self.end_label = widgets.HTML(layout=widgets.Layout(width="auto"))
        self.granularity_badge = widgets.HTML(layout=widgets.Layout(width="auto"))

        self.btn_zoom_in = widgets.Button(
            description="+",
            tooltip="Zoom in to selection",
            layout=widgets.Layout(width="26px", height="22px", padding="0px"),
        )
        self.btn_zoom_out = widgets.Button(
            description="−",
            tooltip="Zoom out",
            layout=widgets.Layout(width="26px", height="22px", padding="0px"),
        )
        self.btn_reset = widgets.Button(
            description="↺",
            tooltip="Reset zoom",
            layout=widgets.Layout(width="26px", height="22px", padding="0px"),
        )

        self.tick_strip = TickStrip()

        # --- Layout -----------------------------------------------------------
        header = widgets.HBox(
            [
                self.description_label,
                self.start_label,
                widgets.HTML("&ndash;"),
                self.end_label,
                self.granularity_badge,
                self.btn_zoom_in,
                self.btn_zoom_out,
                self.btn_reset,
            ],
            layout=widgets.Layout(align_items="center", gap="6px"),
        )
        super().__init__([header, self.slider, self.tick_strip], **kwargs)

        # --- Wiring -----------------------------------------------------------
        self.slider.observe(self._commit_slider_value, names="value")
        self.observe(self._commit_written_value, names="value")
        self.observe(self._commit_disabled, names="disabled")

        self.btn_zoom_in.on_click(self._zoom_in)
        self.btn_zoom_out.on_click(self._zoom_out)
        self.btn_reset.on_click(self._reset)

        # Initialize traits (and the rendered fields) from the controller
        self._syncing = True
        try:
            self.disabled = bool(disabled)
        finally:
            self._syncing = False
        if value is not None:
            self.controller.write_value(value)
        self._sync_from_controller()

    # --- Public API -----------------------------------------------------------

    def on_range_change(self, callback):
        """Register ``callback(range)`` on the underlying controller."""
        return self.controller.on_range_change(callback)

    def on_granularity_change(self, callback):
        """Register ``callback(event)`` on the underlying controller."""
        return self.controller.on_granularity_change(callback)

    def zoom_in(self) -> None:
        self.controller.zoom_in()
        self._sync_from_controller()

    def zoom_out(self) -> None:
        self.controller.zoom_out()
        self._sync_from_controller()

    def reset_zoom(self) -> None:
        self.controller.reset_zoom()
        self._sync_from_controller()

    # --- Helpers --------------------------------------------------------------

    def _sync_from_controller(self) -> None:
        """Push controller display fields into the child widgets, without feedback."""
        ctl = self.controller
        self._syncing = True
        try:
            # max before value: IntRangeSlider clamps value to the current bounds
            self.slider.max = ctl.slider_max
            self.slider.value = tuple(ctl.slider_values)
            self.slider.disabled = ctl.disabled

            self.start_label.value = f"<b>{ctl.selection_start_label}</b>"
            self.end_label.value = f"<b>{ctl.selection_end_label}</b>"
            self.granularity_badge.value = f"<small>{ctl.granularity_label}</small>"
            self.tick_strip.ticks = [tick.as_dict() for tick in ctl.tick_labels]

            self.btn_zoom_in.disabled = ctl.disabled or not ctl.can_zoom_in
            self.btn_zoom_out.disabled = ctl.disabled or not ctl.can_zoom_out
            self.btn_reset.disabled = ctl.disabled or not ctl.is_zoomed

            self.granularity = ctl.current_level
            self.value = ctl.value
        finally:
            self._syncing = False

    def _commit_slider_value(self, change) -> None:
        """When a thumb moves, let the controller correct and map it."""
        if self._syncing:
            return
        self.controller.on_slider_change(change.new)
        self._sync_from_controller()

    def _commit_written_value(self, change) -> None:
        """An externally assigned ``value`` is written through the controller."""
        if self._syncing:
            return
        self.controller.write_value(change.new)
        self._sync_from_controller()

    def _commit_disabled(self, change) -> None:
        if self._syncing:
            return
        self.controller.set_disabled_state(change.new)
        self._sync_from_controller()

    # --- Button handlers ------------------------------------------------------

    def _zoom_in(self, _) -> None:
        self.zoom_in()

    def _zoom_out(self, _) -> None:
        self.zoom_out()

    def _reset(self, _) -> None:
        self.reset_zoom()
