# dashboard/forms.py

from django import forms
from django.core.validators import validate_slug

GENERAL_MOMENT_TYPE = 'General'


class ServiceForm(forms.Form):
    """Create or edit a service. The slug is its key and is fixed once saved."""

    slug = forms.CharField(
        max_length=60,
        validators=[validate_slug],
        widget=forms.TextInput(attrs={'class': 'form-control', 'placeholder': 'birthday'}),
    )
    title = forms.CharField(
        max_length=120,
        widget=forms.TextInput(attrs={'class': 'form-control', 'placeholder': 'Birthday Decoration'}),
    )
    description = forms.CharField(
        required=False,
        widget=forms.Textarea(attrs={'class': 'form-control', 'rows': 3}),
    )
    features = forms.CharField(
        required=False,
        help_text='Comma separated',
        widget=forms.TextInput(attrs={'class': 'form-control', 'placeholder': 'Balloons, Lights, Cake Table'}),
    )
    price_start = forms.DecimalField(
        min_value=0,
        decimal_places=2,
        widget=forms.NumberInput(attrs={'class': 'form-control', 'step': '1'}),
    )
    image_url = forms.URLField(
        required=False,
        widget=forms.URLInput(attrs={'class': 'form-control', 'placeholder': 'https://...'}),
    )
    image = forms.ImageField(
        required=False,
        widget=forms.ClearableFileInput(attrs={'class': 'form-control', 'accept': 'image/*'}),
    )

    def __init__(self, *args, editing=False, **kwargs):
        super().__init__(*args, **kwargs)
        self.editing = editing
        if editing:
            self.fields['slug'].disabled = True

    def clean_features(self):
        raw = self.cleaned_data.get('features') or ''
        return [f.strip() for f in raw.split(',') if f.strip()]


class ProductItemForm(forms.Form):
    """Create or edit a product item of one service"""

    slug = forms.CharField(
        max_length=80,
        validators=[validate_slug],
        widget=forms.TextInput(attrs={'class': 'form-control', 'placeholder': 'birthday-classic'}),
    )
    name = forms.CharField(
        max_length=150,
        widget=forms.TextInput(attrs={'class': 'form-control'}),
    )
    price = forms.DecimalField(
        min_value=0,
        decimal_places=2,
        widget=forms.NumberInput(attrs={'class': 'form-control', 'step': '1'}),
    )
    old_price = forms.DecimalField(
        required=False,
        min_value=0,
        decimal_places=2,
        widget=forms.NumberInput(attrs={'class': 'form-control', 'step': '1'}),
    )
    short_description = forms.CharField(
        required=False,
        max_length=200,
        widget=forms.TextInput(attrs={'class': 'form-control'}),
    )
    full_description = forms.CharField(
        required=False,
        widget=forms.Textarea(attrs={'class': 'form-control', 'rows': 4}),
    )
    tags = forms.CharField(
        required=False,
        help_text='Comma separated, e.g. bestseller, new',
        widget=forms.TextInput(attrs={'class': 'form-control'}),
    )
    stock_qty = forms.IntegerField(
        min_value=0,
        initial=10,
        widget=forms.NumberInput(attrs={'class': 'form-control'}),
    )
    rating = forms.DecimalField(
        required=False,
        min_value=0,
        max_value=5,
        decimal_places=1,
        widget=forms.NumberInput(attrs={'class': 'form-control', 'step': '0.1'}),
    )
    reviews_count = forms.IntegerField(
        required=False,
        min_value=0,
        widget=forms.NumberInput(attrs={'class': 'form-control'}),
    )
    image_url = forms.URLField(
        required=False,
        widget=forms.URLInput(attrs={'class': 'form-control', 'placeholder': 'https://...'}),
    )
    image = forms.ImageField(
        required=False,
        widget=forms.ClearableFileInput(attrs={'class': 'form-control', 'accept': 'image/*'}),
    )

    def __init__(self, *args, editing=False, **kwargs):
        super().__init__(*args, **kwargs)
        self.editing = editing
        if editing:
            self.fields['slug'].disabled = True

    def clean_tags(self):
        raw = self.cleaned_data.get('tags') or ''
        return [t.strip().lower() for t in raw.split(',') if t.strip()]


class TestimonialForm(forms.Form):
    """New testimonial. Without an image the author gets a placeholder avatar."""

    RATING_CHOICES = [(str(r / 2), str(r / 2)) for r in range(10, 1, -1)]

    name = forms.CharField(
        max_length=100,
        widget=forms.TextInput(attrs={'class': 'form-control'}),
    )
    rating = forms.TypedChoiceField(
        choices=RATING_CHOICES,
        coerce=float,
        initial='5.0',
        widget=forms.Select(attrs={'class': 'form-select'}),
    )
    comment = forms.CharField(
        widget=forms.Textarea(attrs={'class': 'form-control', 'rows': 3}),
    )
    image_url = forms.URLField(
        required=False,
        widget=forms.URLInput(attrs={'class': 'form-control', 'placeholder': 'https://...'}),
    )
    image = forms.ImageField(
        required=False,
        widget=forms.ClearableFileInput(attrs={'class': 'form-control', 'accept': 'image/*'}),
    )


class MomentForm(forms.Form):
    """New gallery photo, typed by one of the service titles"""

    name = forms.CharField(
        max_length=120,
        widget=forms.TextInput(attrs={'class': 'form-control'}),
    )
    type = forms.ChoiceField(
        initial=GENERAL_MOMENT_TYPE,
        widget=forms.Select(attrs={'class': 'form-select'}),
    )
    image_url = forms.URLField(
        required=False,
        widget=forms.URLInput(attrs={'class': 'form-control', 'placeholder': 'https://...'}),
    )
    image = forms.ImageField(
        required=False,
        widget=forms.ClearableFileInput(attrs={'class': 'form-control', 'accept': 'image/*'}),
    )

    def __init__(self, *args, catalog=None, **kwargs):
        super().__init__(*args, **kwargs)
        titles = [s.title for s in catalog.services] if catalog is not None else []
        self.fields['type'].choices = [(t, t) for t in titles] + [(GENERAL_MOMENT_TYPE, GENERAL_MOMENT_TYPE)]

    def clean(self):
        cleaned_data = super().clean()
        if not cleaned_data.get('image') and not cleaned_data.get('image_url'):
            raise forms.ValidationError('Add an image file or an image URL.')
        return cleaned_data
