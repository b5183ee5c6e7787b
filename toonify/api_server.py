#!/usr/bin/env python3
"""
toonify API server.
Template registration and photo conversion over HTTP; outputs are written
to the results folder and served back from /outputs.
"""

import os
import logging
from datetime import datetime, timezone
from typing import Optional

from dotenv import load_dotenv

# Load environment variables first
load_dotenv()

from flask import Flask, request, jsonify, send_file
from flask_cors import CORS

from .errors import DecodeError, EmptyInputError, NoOutputError, PipelineError
from .models.template_style import ColorSample, Template, TemplateStyle
from .pipeline.photo_converter import EDGE_THRESHOLD, convert_photo
from .pipeline.template_analyzer import MIN_TEMPLATE_IMAGES, register_template
from .repositories.output_repository import OutputRepository
from .repositories.template_repository import TemplateRepository
from .services.image_service import ImageService

# Configuration
RESULTS_FOLDER = os.getenv("RESULTS_FOLDER", "data/outputs")
MAX_TEMPLATE_IMAGES = int(os.getenv("MAX_TEMPLATE_IMAGES", "10"))
MAX_UPLOAD_SIZE_MB = int(os.getenv("MAX_UPLOAD_SIZE_MB", "10"))
MAX_UPLOAD_BYTES = MAX_UPLOAD_SIZE_MB * 1024 * 1024
APP_ENV = os.getenv("APP_ENV", "development")

logger = logging.getLogger(__name__)


def _flag(value: Optional[str]) -> bool:
    return (value or "").strip().lower() == "true"


def _too_large_response(filename: str):
    logger.warning(f"Rejected upload '{filename}': larger than {MAX_UPLOAD_SIZE_MB}MB")
    return jsonify({'error': f'File too large. Maximum size is {MAX_UPLOAD_SIZE_MB}MB.'}), 413


def seed_test_template(registry: TemplateRepository) -> Template:
    """Register a placeholder template so the UI has something to pick in development."""
    template = Template(
        id=f"test-template-{int(datetime.now(timezone.utc).timestamp() * 1000)}",
        name="Test template",
        image_count=5,
        thumbnail_url="",
        style_data=TemplateStyle(dominant_color=ColorSample(r=200, g=200, b=200), sample_count=1000),
        created_at=datetime.now(timezone.utc),
    )
    registry.add(template)
    logger.info(f"Seeded test template: {template.id}")
    return template


def create_app(
    registry: Optional[TemplateRepository] = None,
    sink: Optional[OutputRepository] = None,
) -> Flask:
    """
    Build the Flask app around an injected template registry and output sink.
    """
    registry = registry if registry is not None else TemplateRepository()
    sink = sink if sink is not None else OutputRepository(RESULTS_FOLDER)
    image_service = ImageService()

    app = Flask(__name__)
    CORS(app)  # Enable CORS for frontend communication
    # whole-request cap; each file is checked against MAX_UPLOAD_BYTES after reading
    app.config['MAX_CONTENT_LENGTH'] = (MAX_TEMPLATE_IMAGES + 1) * MAX_UPLOAD_BYTES

    if len(registry) == 0 and APP_ENV != "production" and _flag(os.getenv("ADD_TEST_TEMPLATE")):
        seed_test_template(registry)

    @app.route('/api/health', methods=['GET'])
    def health_check():
        """Health check endpoint."""
        return jsonify({
            'status': 'ok',
            'env': APP_ENV,
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'templates': len(registry),
        })

    @app.route('/api/templates', methods=['GET'])
    def list_templates():
        return jsonify([t.to_dict() for t in registry.list()])

    @app.route('/api/templates', methods=['POST'])
    def create_template():
        """Register a template from 5-10 sample images."""
        name = (request.form.get('name') or '').strip()
        files = request.files.getlist('images')

        if not name or len(files) < MIN_TEMPLATE_IMAGES:
            return jsonify({'error': f'Template name and at least {MIN_TEMPLATE_IMAGES} images are required'}), 400
        if len(files) > MAX_TEMPLATE_IMAGES:
            return jsonify({'error': f'At most {MAX_TEMPLATE_IMAGES} images are allowed'}), 400

        uploads = []
        for f in files:
            data = f.read()
            if len(data) > MAX_UPLOAD_BYTES:
                return _too_large_response(f.filename)
            uploads.append(data)

        try:
            template = register_template(name, uploads, registry, sink)
        except EmptyInputError as e:
            logger.warning(f"Template '{name}' rejected: {e}")
            return jsonify({'error': 'None of the images could be read, check their format'}), 400
        except PipelineError as e:
            logger.error(f"Template creation error: {e}")
            return jsonify({'error': f'Template creation failed: {e}'}), 500

        return jsonify(template.to_dict()), 201

    @app.route('/api/templates/<template_id>', methods=['DELETE'])
    def delete_template(template_id):
        if not registry.delete(template_id):
            return jsonify({'error': 'Template not found'}), 404
        logger.info(f"Deleted template {template_id}")
        return jsonify({'success': True})

    @app.route('/api/convert', methods=['POST'])
    def convert():
        """Turn one photo into an outline and/or a colored illustration."""
        template_id = request.form.get('template_id')
        photo_file = request.files.get('photo')
        want_outline = _flag(request.form.get('generate_outline'))
        want_colored = _flag(request.form.get('generate_colored'))

        if not template_id or photo_file is None:
            return jsonify({'error': 'Template ID and photo are required'}), 400
        if not (want_outline or want_colored):
            return jsonify({'error': 'Request at least one of outline or colored output'}), 400

        # Templates are only looked up here; registration owns mutation
        if registry.get(template_id) is None:
            return jsonify({'error': 'Template not found'}), 404

        data = photo_file.read()
        if len(data) > MAX_UPLOAD_BYTES:
            return _too_large_response(photo_file.filename)

        try:
            photo = image_service.decode(data)
        except DecodeError as e:
            logger.warning(f"Unreadable photo '{photo_file.filename}': {e}")
            return jsonify({'error': 'Could not read the uploaded photo, check its format'}), 400

        try:
            result = convert_photo(photo, want_outline, want_colored, threshold=EDGE_THRESHOLD)
        except NoOutputError as e:
            logger.error(f"Conversion failed for template {template_id}: {e} {e.branch_errors}")
            return jsonify({'error': f'Conversion failed: {e}'}), 500

        response = {}
        for branch, buffer in (('outline', result.outline), ('colored', result.colored)):
            if buffer is None:
                continue
            try:
                filename = sink.save(image_service.encode(buffer), prefix=branch)
            except (PipelineError, OSError) as e:
                logger.error(f"Could not store {branch} output for template {template_id}: {e}")
                continue
            response[branch] = sink.url_for(filename)

        if not response:
            return jsonify({'error': 'Conversion failed, no image could be generated'}), 500
        return jsonify(response)

    @app.route('/outputs/<filename>', methods=['GET'])
    def serve_output(filename):
        """Serve stored outputs."""
        try:
            path = sink.path_for(filename)
        except ValueError:
            return jsonify({'error': 'Image not found'}), 404
        if not path.is_file():
            return jsonify({'error': 'Image not found'}), 404
        return send_file(path.resolve(), mimetype='image/jpeg')

    @app.errorhandler(413)
    def too_large(e):
        """Handle file too large error."""
        return jsonify({'error': f'File too large. Maximum size is {MAX_UPLOAD_SIZE_MB}MB.'}), 413

    @app.errorhandler(500)
    def internal_error(e):
        """Handle internal server error."""
        logger.error(f"Internal server error: {e}")
        return jsonify({'error': 'Internal server error'}), 500

    return app


def main():
    # --- Centralized Logging Configuration ---
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format='%(asctime)s - %(name)-25s - %(levelname)-8s - %(message)s',
        datefmt='%H:%M:%S'
    )
    app = create_app()
    port = int(os.getenv("API_SERVER_PORT", "3000"))

    print("🚀 Starting toonify API server...")
    print(f"📁 Results directory: {RESULTS_FOLDER}")
    print(f"🔧 Max upload size: {MAX_UPLOAD_SIZE_MB}MB")
    print(f"🖊  Edge threshold: {EDGE_THRESHOLD}")
    print("="*60)

    app.run(debug=APP_ENV != "production", host='0.0.0.0', port=port)


if __name__ == '__main__':
    main()
