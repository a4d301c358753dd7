"""Operation planner: drives the engine through the fixed stage order."""

from collections.abc import Iterator
from contextlib import contextmanager

from loguru import logger

from ..common.errors import MissingParameterError, SizeLimitExceededError, UnsupportedFormatError, VimgError
from ..common.schemas import SaveOptions, TransformOptions
from ..common.types import Angle, Direction, Gravity, ImageType
from ..engine.base import ImageEngine, ImageHandle
from ..engine.context import EngineContext, get_default_context
from ..engine.detect import detect_image_type
from ..geometry.crop import calculate_crop
from ..geometry.orientation import resolve_orientation
from ..geometry.watermark import watermark_position, watermark_size
from ..utils.profiling import timed
from .normalizer import apply_defaults, clamp_to_source, normalize_operation
from .plan import ResizePlan, plan_resize, shrink_on_load_factor

TEXT_WATERMARK_DPI = 150
TEXT_WATERMARK_OPACITY = 0.25


class _Working:
    """The one handle a run currently owns."""

    def __init__(self, handle: ImageHandle):
        self.handle: ImageHandle = handle

    def replace(self, new: ImageHandle) -> None:
        old, self.handle = self.handle, new
        old.release()

    def release(self) -> None:
        if not self.handle.released:
            self.handle.release()


class Processor:
    """Turns TransformOptions into a sequence of engine calls.

    process() takes ownership of the handle it is given and returns the
    handle holding the result. Every intermediate handle is released as
    soon as it is superseded; on failure everything still owned is
    released and the error carries the name of the failing stage.

    Example:
        processor = Processor(context)
        result = processor.process(handle, TransformOptions(width=300, crop=True))
        with result:
            data = processor.save(result, options)
    """

    def __init__(self, context: EngineContext | None = None):
        self.context: EngineContext = context or get_default_context()
        self.engine: ImageEngine = self.context.engine

    @timed
    def process(self, handle: ImageHandle, options: TransformOptions) -> ImageHandle:
        with self.context.limit():
            return self._run(handle, options)

    def save(self, handle: ImageHandle, options: TransformOptions) -> bytes:
        """Encode `handle` with the output controls of `options`.

        The handle stays owned by the caller.
        """
        with self.context.limit():
            return self._save(handle, options)

    def _save(self, handle: ImageHandle, options: TransformOptions) -> bytes:
        engine = self.engine
        intermediates: list[ImageHandle] = []

        try:
            with self._stage("save"):
                options = apply_defaults(options, handle.image_type, self.context.config)
                self._check_output_type(options.type)
                save_options = SaveOptions.from_options(options)

                current = handle
                interpretation = engine.interpretation(current)
                if interpretation is not None and interpretation != save_options.interpretation:
                    current = engine.colourspace(current, save_options.interpretation)
                    intermediates.append(current)

                if save_options.output_icc and engine.has_profile(current):
                    current = engine.icc_transform(current, save_options.output_icc)
                    intermediates.append(current)

                logger.debug(
                    f"stage=save type={save_options.type} quality={save_options.quality} "
                    + f"compression={save_options.compression}"
                )
                return engine.encode(current, save_options)
        finally:
            for intermediate in intermediates:
                intermediate.release()

    # ─────────────────────────────────────────────────────────
    # Pipeline
    # ─────────────────────────────────────────────────────────

    @contextmanager
    def _stage(self, name: str) -> Iterator[None]:
        try:
            yield
        except VimgError as exc:
            exc.stage = name if exc.stage is None else f"{name}.{exc.stage}"
            logger.error(f"Stage {name} failed: {exc}")
            raise

    def _check_output_type(self, image_type: ImageType) -> None:
        if not self.context.registry.is_type_supported_save(image_type):
            raise UnsupportedFormatError(f"Unsupported image output type: {image_type}")

    def _check_size(self, width: int, height: int) -> None:
        max_size = self.context.config.max_size
        if width > max_size or height > max_size:
            raise SizeLimitExceededError(f"{width}x{height} exceeds the maximum size of {max_size}")

    def _run(self, handle: ImageHandle, options: TransformOptions) -> ImageHandle:
        engine = self.engine
        working = _Working(handle)

        try:
            with self._stage("validate"):
                if options.type != ImageType.UNKNOWN:
                    self._check_output_type(options.type)
                options = normalize_operation(options)

            with self._stage("rotate"):
                options = self._rotate_and_flip(working, options)

            # rotation may have swapped width and height
            with self._stage("normalize"):
                options = normalize_operation(options)

            with self._stage("plan"):
                in_width, in_height = working.handle.width, working.handle.height
                options = clamp_to_source(options, in_width, in_height)
                window_size = engine.interpolator_window_size(options.interpolator)
                plan = plan_resize(options, in_width, in_height, window_size)
                logger.debug(
                    f"stage=plan source={in_width}x{in_height} target={plan.width}x{plan.height} "
                    + f"factor={plan.factor:.4f} shrink={plan.shrink} residual={plan.residual:.4f} "
                    + f"force={plan.force} crop={plan.crop} embed={plan.embed}"
                )

            with self._stage("shrink_on_load"):
                plan = self._shrink_on_load(working, plan)

            with self._stage("zoom"):
                if options.zoom != 0:
                    factor = options.zoom + 1
                    logger.debug(f"stage=zoom factor={factor}")
                    working.replace(engine.zoom(working.handle, factor, factor))

            with self._stage("transform"):
                if self._should_transform(working.handle, options, plan):
                    self._transform(working, options, plan)
                else:
                    logger.debug("stage=transform skipped, nothing to resize or extract")

            with self._stage("effects"):
                self._apply_effects(working, options)

            with self._stage("watermark_text"):
                self._watermark_text(working, options)

            with self._stage("watermark_image"):
                self._watermark_image(working, options)

            with self._stage("flatten"):
                if (
                    working.handle.image_type == ImageType.PNG
                    and not options.background.is_black()
                    and engine.has_alpha(working.handle)
                ):
                    logger.debug(f"stage=flatten background={options.background.rgb()}")
                    working.replace(engine.flatten(working.handle, options.background))

            with self._stage("gamma"):
                if options.gamma > 0:
                    logger.debug(f"stage=gamma exponent={options.gamma}")
                    working.replace(engine.gamma(working.handle, options.gamma))

        except BaseException:
            working.release()
            raise

        return working.handle

    def _rotate_and_flip(self, working: _Working, options: TransformOptions) -> TransformOptions:
        engine = self.engine
        exif_code = 0 if options.no_auto_rotate else engine.exif_orientation(working.handle)
        rotation, flip = resolve_orientation(exif_code, options.rotate, options.flip, options.no_auto_rotate)
        logger.debug(f"stage=rotate exif={exif_code} rotation={int(rotation)} flip={flip} flop={options.flop}")

        if rotation != Angle.D0:
            working.replace(engine.rotate(working.handle, rotation))
        if flip:
            working.replace(engine.flip(working.handle, Direction.HORIZONTAL))
        if options.flop:
            working.replace(engine.flip(working.handle, Direction.VERTICAL))

        if rotation != Angle.D0 or flip or options.flop:
            working.handle.buffer = engine.encode_buffer(working.handle)

        return options.update(rotate=rotation, flip=flip)

    def _shrink_on_load(self, working: _Working, plan: ResizePlan) -> ResizePlan:
        handle = working.handle
        shrink = shrink_on_load_factor(handle.image_type, plan.shrink, self.engine.version)
        if shrink < 2 or not handle.buffer:
            return plan

        logger.debug(f"stage=shrink_on_load type={handle.image_type} shrink={shrink}")
        working.replace(self.engine.load_shrunk(handle.buffer, handle.image_type, shrink))
        return plan.after_shrink_on_load(plan.factor / shrink)

    def _should_transform(self, handle: ImageHandle, options: TransformOptions, plan: ResizePlan) -> bool:
        in_width, in_height = handle.width, handle.height
        return (
            plan.force
            or 0 < plan.width < in_width
            or 0 < plan.height < in_height
            or options.extract is not None
            or (options.enlarge and (plan.width > in_width or plan.height > in_height))
            or options.trim
        )

    def _transform(self, working: _Working, options: TransformOptions, plan: ResizePlan) -> None:
        engine = self.engine
        residual = plan.residual

        if plan.shrink > 1:
            working.replace(engine.integral_shrink(working.handle, plan.shrink, plan.shrink))
            # correct the integer rounding of the shrink against the live size
            xresidual = plan.width / working.handle.width
            yresidual = plan.height / working.handle.height
            residual = max(xresidual, yresidual) if plan.crop else min(xresidual, yresidual)

        if plan.force:
            handle = working.handle
            xscale, yscale = plan.width / handle.width, plan.height / handle.height
            logger.debug(f"stage=transform force {handle.width}x{handle.height} -> {plan.width}x{plan.height}")
            working.replace(engine.affine_resize(handle, xscale, options.interpolator, vscale=yscale))
        elif residual not in (0.0, 1.0):
            logger.debug(f"stage=transform affine residual={residual:.4f}")
            working.replace(engine.affine_resize(working.handle, residual, options.interpolator))

        self._extract_or_embed(working, options, plan)

    def _extract_or_embed(self, working: _Working, options: TransformOptions, plan: ResizePlan) -> None:
        engine = self.engine
        handle = working.handle
        in_width, in_height = handle.width, handle.height

        if options.gravity == Gravity.SMART or options.smart_crop:
            self._check_size(plan.width, plan.height)
            logger.debug(f"stage=transform smart crop {plan.width}x{plan.height}")
            working.replace(engine.smart_crop(handle, plan.width, plan.height))

        elif plan.crop:
            width, height = min(in_width, plan.width), min(in_height, plan.height)
            self._check_size(width, height)
            left, top = calculate_crop(in_width, in_height, plan.width, plan.height, options.gravity)
            left, top = max(left, 0), max(top, 0)
            logger.debug(f"stage=transform crop {width}x{height}+{left}+{top} gravity={options.gravity}")
            working.replace(engine.extract(handle, left, top, width, height))

        elif plan.embed:
            left, top = int((plan.width - in_width) / 2), int((plan.height - in_height) / 2)
            logger.debug(f"stage=transform embed {plan.width}x{plan.height}+{left}+{top} extend={options.extend}")
            working.replace(
                engine.embed(handle, left, top, plan.width, plan.height, options.extend, options.background)
            )

        elif options.trim:
            box = engine.find_trim(handle, options.background, options.threshold)
            logger.debug(f"stage=transform trim {box}")
            working.replace(engine.extract(handle, box.left, box.top, box.width, box.height))

        elif options.extract is not None:
            left, top, width, height = options.extract.resolve(in_width, in_height)
            # fall back to the resolved box, only when a size was requested at all
            if options.width or options.height:
                width = width or plan.width
                height = height or plan.height
            if width == 0 or height == 0:
                raise MissingParameterError("extract area width/height params are required")
            self._check_size(width, height)
            logger.debug(f"stage=transform extract {width}x{height}+{left}+{top}")
            working.replace(engine.extract(handle, left, top, width, height))

    def _apply_effects(self, working: _Working, options: TransformOptions) -> None:
        engine = self.engine

        blur = options.gaussian_blur
        if blur.sigma > 0 or blur.min_ampl > 0:
            if blur.sigma == 0:
                blur = blur.model_copy(update={"sigma": 1.0})
            logger.debug(f"stage=effects blur sigma={blur.sigma} min_ampl={blur.min_ampl}")
            working.replace(engine.gaussian_blur(working.handle, blur))

        sharpen = options.sharpen
        if sharpen.sigma > 0 and (sharpen.y2 > 0 or sharpen.y3 > 0):
            logger.debug(f"stage=effects sharpen sigma={sharpen.sigma}")
            working.replace(engine.sharpen(working.handle, sharpen))

    def _watermark_text(self, working: _Working, options: TransformOptions) -> None:
        watermark = options.watermark
        if not watermark.text:
            return

        width = watermark.width or working.handle.width // 6
        watermark = watermark.model_copy(
            update={
                "font": watermark.font or self.context.config.watermark_font,
                "width": width,
                "dpi": watermark.dpi or TEXT_WATERMARK_DPI,
                "margin": watermark.margin or width,
                "opacity": watermark.opacity or TEXT_WATERMARK_OPACITY,
            }
        )
        logger.debug(f"stage=watermark_text font='{watermark.font}' width={width} dpi={watermark.dpi}")
        working.replace(self.engine.watermark_text(working.handle, watermark))

    def _watermark_image(self, working: _Working, options: TransformOptions) -> None:
        mark = options.watermark_image
        if not mark.buf:
            return

        engine = self.engine
        handle = working.handle
        mark_type = detect_image_type(mark.buf, self.context.registry)
        if mark_type == ImageType.UNKNOWN:
            raise UnsupportedFormatError("Unsupported watermark image format")

        width, height = watermark_size(handle.width, handle.height, mark.width, mark.height, mark.relative)
        mark_options = TransformOptions(width=width, height=height, maintain_aspect=True)

        with self._run(engine.decode(mark.buf, mark_type), mark_options) as mark_handle:
            left, top = watermark_position(handle.width, handle.height, mark_handle.width, mark_handle.height, mark)
            opacity = mark.opacity or 1.0
            logger.debug(
                f"stage=watermark_image {mark_handle.width}x{mark_handle.height}+{left}+{top} "
                + f"opacity={opacity} blend={mark.blend_mode}"
            )
            working.replace(engine.watermark_image(handle, mark_handle, left, top, opacity, mark.blend_mode))
